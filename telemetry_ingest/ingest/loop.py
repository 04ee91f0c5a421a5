"""Ingestion loop: read line → decode → live buffer → background persist.

Runs on one dedicated thread doing blocking reads against the transport.
Nothing downstream may block it:

- the live buffer offer never waits (a full buffer drops its oldest packet);
- persistence is submitted fire-and-forget;
- a malformed line or a failed read is logged and skipped.

``stop()`` sets an event that is checked between reads, so shutdown
latency is bounded by the transport's read timeout.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from ..core.domain.packet import Packet
from ..core.monitoring.stats import IngestStats
from ..core.parsing.packet_decoder import decode_packet
from ..errors import DecodeError, TransportClosedError, TransportError
from ..live.ring_buffer import RingBuffer
from ..metrics import DECODE_ERRORS, LINES_READ, LIVE_BUFFER_DROPPED, TRANSPORT_ERRORS
from ..transports.base import LineTransport
from .persist_dispatcher import PersistDispatcher

logger = logging.getLogger(__name__)

DEFAULT_ERROR_BACKOFF_SECONDS = 0.1


class IngestionLoop:
    """Conecta transporte, decoder, live buffer y persistencia."""

    def __init__(
        self,
        transport: LineTransport,
        live_buffer: RingBuffer[Packet],
        persister: Optional[PersistDispatcher] = None,
        decoder: Callable[[str], Packet] = decode_packet,
        on_packet: Optional[Callable[[Packet], None]] = None,
        error_backoff_seconds: float = DEFAULT_ERROR_BACKOFF_SECONDS,
    ):
        """
        Args:
            transport: Line source (serial port, replay file)
            live_buffer: Bounded drop-oldest buffer read by the presentation side
            persister: Background inserter; None runs without a database
            decoder: Line decoder
            on_packet: Optional hook after each decoded packet (e.g. request a redraw)
            error_backoff_seconds: Pause after a failed read before retrying
        """
        self._transport = transport
        self._live_buffer = live_buffer
        self._persister = persister
        self._decoder = decoder
        self._on_packet = on_packet
        self._error_backoff = error_backoff_seconds

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._stats = IngestStats()

    def start(self) -> None:
        """Run the loop on a dedicated daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, daemon=True, name="ingest-loop")
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal the loop to exit after the current read and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("[INGEST] Loop did not stop within %.1fs", timeout or 0)
            else:
                self._thread = None

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def run(self) -> None:
        """Blocking loop; returns on stop() or when the stream ends."""
        try:
            self._transport.open()
        except TransportError as e:
            logger.error("[INGEST] Cannot open %s transport: %s", self._transport.transport_name, e)
            return

        self._running = True
        logger.info("[INGEST] Started on %s transport", self._transport.transport_name)
        try:
            while not self._stop_event.is_set():
                try:
                    line = self._transport.read_line()
                except TransportClosedError as e:
                    logger.info("[INGEST] Transport closed: %s", e)
                    break
                except TransportError as e:
                    self._stats.transport_errors += 1
                    TRANSPORT_ERRORS.inc()
                    logger.warning("[INGEST] Read error: %s", e)
                    self._stop_event.wait(self._error_backoff)
                    continue

                if line is None:
                    continue
                self.process_line(line)
        finally:
            self._running = False
            self._transport.close()
            logger.info("[INGEST] Stopped. %s", self._stats)

    def process_line(self, line: str) -> Optional[Packet]:
        """Decode one line and fan it out. Never raises for bad input."""
        self._stats.lines_read += 1
        LINES_READ.inc()

        try:
            packet = self._decoder(line)
        except DecodeError as e:
            self._stats.decode_errors += 1
            DECODE_ERRORS.labels(kind=e.kind.value).inc()
            logger.warning("[INGEST] Parse error: %s (line=%r)", e, line[:120])
            return None

        self._stats.decoded += 1
        self._stats.last_packet_at = time.time()

        if self._live_buffer.offer(packet) is not None:
            self._stats.live_dropped += 1
            LIVE_BUFFER_DROPPED.inc()

        if self._persister is not None:
            self._persister.submit(packet)
            self._stats.persist_submitted += 1

        if self._on_packet is not None:
            try:
                self._on_packet(packet)
            except Exception:
                logger.exception("[INGEST] on_packet hook failed")

        return packet

    @property
    def is_alive(self) -> bool:
        """True while the loop thread exists, including before it has opened the transport."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def stats(self) -> IngestStats:
        return self._stats
