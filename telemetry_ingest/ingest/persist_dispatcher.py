"""Fire-and-forget persistence of decoded packets.

Each packet becomes one future on a thread pool so the device-read loop
returns immediately after submit. Inserts may run concurrently and finish
out of submission order; ids follow write-arrival order. Failures are
routed to the log and the metrics, never back to the caller.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from ..core.domain.packet import Packet
from ..errors import TelemetryError
from ..infrastructure.persistence.packet_store import PacketStore
from ..metrics import PERSISTED

logger = logging.getLogger(__name__)

DEFAULT_NUM_WORKERS = 4
DEFAULT_MAX_PENDING = 10000


class PersistDispatcher:
    """Thread pool wrapper around ``PacketStore.insert``.

    - submit() → returns a Future in microseconds
    - worker threads → block on the INSERT (in parallel)
    - ``max_pending`` bounds the backlog when the database is slow or down
    """

    def __init__(
        self,
        store: PacketStore,
        num_workers: int = DEFAULT_NUM_WORKERS,
        max_pending: int = DEFAULT_MAX_PENDING,
    ):
        self._store = store
        self._executor = ThreadPoolExecutor(
            max_workers=num_workers, thread_name_prefix="persist-worker"
        )
        self._num_workers = num_workers
        self._max_pending = max_pending

        # Metrics
        self._submitted = 0
        self._dropped = 0
        self._persisted = 0
        self._errors = 0
        self._pending = 0
        self._lock = threading.Lock()

    def submit(self, packet: Packet) -> Optional[Future]:
        """Schedule an insert. Returns None if the backlog is full."""
        with self._lock:
            if self._pending >= self._max_pending:
                self._dropped += 1
                logger.warning(
                    "[PERSIST] Backlog full (%d pending), dropped packet time=%s",
                    self._pending, packet.time,
                )
                return None
            self._pending += 1
            self._submitted += 1

        try:
            future = self._executor.submit(self._store.insert, packet)
        except RuntimeError:
            # executor already shut down
            with self._lock:
                self._pending -= 1
                self._dropped += 1
            logger.warning("[PERSIST] Dispatcher stopped, dropped packet time=%s", packet.time)
            return None

        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, future: Future) -> None:
        with self._lock:
            self._pending -= 1

        error = future.exception()
        if error is None:
            with self._lock:
                self._persisted += 1
            PERSISTED.labels(status="success").inc()
            return

        with self._lock:
            self._errors += 1
        PERSISTED.labels(status="failed").inc()
        if isinstance(error, TelemetryError):
            logger.error("[PERSIST] Failed to auto-save packet to database: %s", error)
        else:
            logger.error(
                "[PERSIST] Unexpected insert failure", exc_info=(type(error), error, error.__traceback__)
            )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; with ``wait`` finish in-flight inserts first."""
        self._executor.shutdown(wait=wait)
        logger.info("[PERSIST] Stopped. %s", self.metrics)

    @property
    def metrics(self) -> dict:
        with self._lock:
            return {
                "workers": self._num_workers,
                "pending": self._pending,
                "max_pending": self._max_pending,
                "submitted": self._submitted,
                "dropped": self._dropped,
                "persisted": self._persisted,
                "errors": self._errors,
            }
