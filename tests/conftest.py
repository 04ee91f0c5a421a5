"""Fixtures compartidos: store SQLite temporal, buffers y paquetes."""

from typing import Iterator

import pytest
from sqlalchemy.engine import Engine

from telemetry_common.db import create_db_engine
from telemetry_ingest.core.domain.packet import Packet
from telemetry_ingest.infrastructure.persistence.packet_store import PacketStore
from telemetry_ingest.infrastructure.persistence.schema import ensure_schema
from telemetry_ingest.live.buffer_config import LiveBufferConfig
from telemetry_ingest.live.live_view import LiveView
from telemetry_ingest.live.ring_buffer import RingBuffer

SAMPLE_LINE = "$;Time-12:00:01;Latitude-54.687157;Longitude-25.279652;Satellites-9;Acceleration:0.12,-0.05,0.98"


def make_packet(i: int = 0, z: float = 0.5) -> Packet:
    return Packet(
        time=f"12:00:{i:02d}",
        latitude=54.687157 + i / 1000.0,
        longitude=25.279652 + i / 1000.0,
        satellites=8 + i % 5,
        acceleration=(0.1, -0.2, z),
    )


@pytest.fixture
def packet_factory():
    return make_packet


@pytest.fixture
def sample_line() -> str:
    return SAMPLE_LINE


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'telemetry.db'}"


@pytest.fixture
def engine(sqlite_url) -> Iterator[Engine]:
    eng = create_db_engine(sqlite_url, check_connection=False)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine) -> PacketStore:
    """Store con el esquema creado."""
    ensure_schema(engine)
    return PacketStore(engine)


@pytest.fixture
def live_buffer() -> RingBuffer:
    return RingBuffer(128, name="live_buffer")


@pytest.fixture
def live_view(live_buffer) -> LiveView:
    return LiveView(live_buffer, LiveBufferConfig())
