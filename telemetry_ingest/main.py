from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from telemetry_common.config import Settings, get_settings
from telemetry_common.db import create_db_engine

from . import __version__
from .core.domain.packet import Packet
from .endpoints import exports_router, health_router, live_router, packets_router
from .exports.exporter import PacketExporter
from .infrastructure.persistence.packet_store import PacketStore
from .infrastructure.persistence.schema import ensure_schema
from .ingest.loop import IngestionLoop
from .ingest.persist_dispatcher import PersistDispatcher
from .live.buffer_config import LiveBufferConfig
from .live.live_view import LiveView
from .live.ring_buffer import RingBuffer

logger = logging.getLogger(__name__)


def open_store(settings: Optional[Settings] = None) -> Optional[PacketStore]:
    """Connect and ensure the schema. None when the database is unreachable.

    Ingestion keeps running without a store; only persistence and the
    database-backed operations are unavailable.
    """
    settings = settings or get_settings()
    engine = create_db_engine(settings=settings, check_connection=False)
    try:
        ensure_schema(engine)
    except SQLAlchemyError as e:
        logger.error("[DB] Database unavailable, continuing without persistence: %s", e)
        engine.dispose()
        return None
    return PacketStore(engine)


def create_app(
    store: Optional[PacketStore] = None,
    live_view: Optional[LiveView] = None,
    exporter: Optional[PacketExporter] = None,
    live_buffer: Optional[RingBuffer[Packet]] = None,
    ingest_loop: Optional[IngestionLoop] = None,
    dispatcher: Optional[PersistDispatcher] = None,
) -> FastAPI:
    """Wire the operator API around already-built services."""
    if live_view is None:
        config = LiveBufferConfig.from_env()
        if live_buffer is None:
            live_buffer = RingBuffer(config.live_buffer_capacity, name="live_buffer")
        live_view = LiveView(live_buffer, config)
    if exporter is None and store is not None:
        settings = get_settings()
        exporter = PacketExporter(store, settings.export_dir, settings.export_prefix)

    app = FastAPI(title="Serial Telemetry Service", version=__version__)
    app.state.store = store
    app.state.exporter = exporter
    app.state.live_view = live_view
    app.state.live_buffer = live_buffer
    app.state.ingest_loop = ingest_loop
    app.state.dispatcher = dispatcher

    app.include_router(health_router)
    app.include_router(packets_router)
    app.include_router(exports_router)
    app.include_router(live_router)

    if store is None:
        live_view.notice("Database not connected", level="ERROR")
    else:
        live_view.notice("Connected to database", level="DB")
    return app


def create_app_from_env() -> FastAPI:
    """Factory for ``uvicorn telemetry_ingest.main:create_app_from_env --factory``.

    Serves the database and export operations without a serial reader;
    ``telemetry-ingest run --serve`` runs both in one process.
    """
    settings = get_settings()
    return create_app(store=open_store(settings))
