"""Tests del loop de ingesta: decode → live buffer → persistencia."""

import io
import time
from typing import List, Optional
from unittest.mock import MagicMock

from telemetry_ingest.core.parsing.packet_decoder import encode_packet
from telemetry_ingest.errors import TransportClosedError, TransportError
from telemetry_ingest.ingest.loop import IngestionLoop
from telemetry_ingest.ingest.persist_dispatcher import PersistDispatcher
from telemetry_ingest.live.ring_buffer import RingBuffer
from telemetry_ingest.transports.base import LineTransport
from telemetry_ingest.transports.replay.transport import StreamLineTransport


class ScriptedTransport(LineTransport):
    """Transport que devuelve líneas o lanza errores según un guion."""

    def __init__(self, script: List[object]):
        self._script = list(script)
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def read_line(self) -> Optional[str]:
        if not self._script:
            raise TransportClosedError("script finished")
        step = self._script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    @property
    def transport_name(self) -> str:
        return "scripted"


class IdleTransport(ScriptedTransport):
    """Never yields a line, like a serial port with no traffic."""

    def read_line(self) -> Optional[str]:
        time.sleep(0.01)
        return None


def _replay(lines: List[str]) -> StreamLineTransport:
    data = "".join(line + "\n" for line in lines).encode("utf-8")
    return StreamLineTransport(stream=io.BytesIO(data))


class TestIngestionLoop:

    def test_replay_fills_live_buffer_and_persists(self, store, live_buffer, packet_factory):
        packets = [packet_factory(i) for i in range(5)]
        dispatcher = PersistDispatcher(store, num_workers=2)
        loop = IngestionLoop(_replay([encode_packet(p) for p in packets]), live_buffer, persister=dispatcher)

        loop.run()
        dispatcher.shutdown(wait=True)

        assert live_buffer.drain() == packets
        assert store.count() == 5
        assert loop.stats.decoded == 5
        assert loop.stats.persist_submitted == 5

    def test_bad_lines_are_skipped(self, live_buffer, packet_factory, sample_line):
        lines = ["", "garbage", "x;Acceleration:1,2", sample_line, "$;Time-1;Latitude-x;a;b;c"]
        loop = IngestionLoop(_replay(lines), live_buffer)

        loop.run()

        assert len(live_buffer) == 1
        assert loop.stats.lines_read == 5
        assert loop.stats.decoded == 1
        assert loop.stats.decode_errors == 4

    def test_oversized_number_does_not_end_ingestion(self, live_buffer, sample_line):
        overlong = sample_line.replace("Satellites-9", "Satellites-" + "9" * 5000)
        loop = IngestionLoop(_replay([overlong, sample_line]), live_buffer)

        loop.run()

        assert len(live_buffer) == 1
        assert loop.stats.decode_errors == 1
        assert loop.stats.decoded == 1

    def test_transport_errors_are_retried(self, live_buffer, sample_line):
        transport = ScriptedTransport([TransportError("glitch"), None, sample_line, TransportError("again"), sample_line])
        loop = IngestionLoop(transport, live_buffer, error_backoff_seconds=0.0)

        loop.run()

        assert transport.opened and transport.closed
        assert loop.stats.transport_errors == 2
        assert loop.stats.decoded == 2
        assert not loop.is_running

    def test_open_failure_ends_loop(self, live_buffer):
        transport = MagicMock(spec=LineTransport)
        transport.open.side_effect = TransportError("no such port")
        transport.transport_name = "serial"

        loop = IngestionLoop(transport, live_buffer)
        loop.run()

        transport.read_line.assert_not_called()

    def test_full_live_buffer_drops_oldest(self, packet_factory):
        small = RingBuffer(2)
        packets = [packet_factory(i) for i in range(5)]
        loop = IngestionLoop(_replay([encode_packet(p) for p in packets]), small)

        loop.run()

        assert small.drain() == packets[-2:]
        assert loop.stats.live_dropped == 3

    def test_persist_failures_do_not_stop_ingestion(self, live_buffer, sample_line):
        persister = MagicMock()
        persister.submit.side_effect = [None, None, None]
        hook = MagicMock(side_effect=RuntimeError("redraw failed"))
        loop = IngestionLoop(_replay([sample_line] * 3), live_buffer, persister=persister, on_packet=hook)

        loop.run()

        assert persister.submit.call_count == 3
        assert hook.call_count == 3
        assert len(live_buffer) == 3

    def test_stop_from_another_thread(self, live_buffer):
        transport = IdleTransport([])
        loop = IngestionLoop(transport, live_buffer)

        loop.start()
        deadline = time.time() + 2.0
        while not loop.is_running and time.time() < deadline:
            time.sleep(0.01)
        assert loop.is_alive

        loop.stop(timeout=2.0)

        assert not loop.is_alive
        assert transport.closed
