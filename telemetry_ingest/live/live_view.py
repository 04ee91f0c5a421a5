"""Headless live view: the presentation-side refresh cycle.

Drains the live buffer, keeps the last packet, the z-acceleration series
and a ring of human-readable log lines. A renderer (GUI, TUI, HTTP) only
reads ``snapshot()``; nothing here is a source of truth.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from ..core.domain.packet import Packet
from .buffer_config import LiveBufferConfig
from .ring_buffer import RingBuffer

logger = logging.getLogger(__name__)


def format_log_line(packet: Packet) -> str:
    return (
        f"{packet.time} Lat:{packet.latitude:.6f} Lon:{packet.longitude:.6f} "
        f"Sat:{packet.satellites} AccZ:{packet.acceleration_z:.2f}"
    )


class LiveView:
    """Estado en vivo alimentado por el live buffer."""

    def __init__(
        self,
        live_buffer: RingBuffer[Packet],
        config: Optional[LiveBufferConfig] = None,
    ):
        self._config = config or LiveBufferConfig()
        self._live_buffer = live_buffer
        self._series: RingBuffer[float] = RingBuffer(
            self._config.live_series_capacity, name="live_series"
        )
        self._log: RingBuffer[str] = RingBuffer(
            self._config.log_ring_capacity, name="log_ring"
        )
        self._history: List[float] = []
        self._last_packet: Optional[Packet] = None
        self._refreshes = 0
        self._lock = threading.Lock()

    def refresh(self) -> int:
        """Drain pending packets into the series and log ring.

        Returns:
            Number of packets consumed.
        """
        packets = self._live_buffer.drain()
        for packet in packets:
            self._series.offer(packet.acceleration_z)
            self._log.offer(format_log_line(packet))
        with self._lock:
            if packets:
                self._last_packet = packets[-1]
            self._refreshes += 1
        return len(packets)

    def notice(self, message: str, level: str = "INFO") -> None:
        """Append an operational notice such as ``[DB] ...`` to the log ring."""
        self._log.offer(f"[{level}] {message}")

    def clear(self) -> None:
        """Vacía serie y log (no toca la base de datos)."""
        self._series.clear()
        self._log.clear()
        with self._lock:
            self._history = []

    def load_history(self, series: List[float]) -> None:
        with self._lock:
            self._history = list(series)

    def clear_history(self) -> None:
        with self._lock:
            self._history = []

    @property
    def last_packet(self) -> Optional[Packet]:
        with self._lock:
            return self._last_packet

    def series(self) -> List[float]:
        return self._series.snapshot()

    def log_lines(self) -> List[str]:
        return self._log.snapshot()

    def display_series(self) -> List[float]:
        """Historical series when one is loaded, otherwise the live one."""
        with self._lock:
            if self._history:
                return list(self._history)
        return self._series.snapshot()

    def snapshot(self) -> dict:
        last = self.last_packet
        with self._lock:
            history = list(self._history)
            refreshes = self._refreshes
        return {
            "last_packet": None if last is None else {
                "time": last.time,
                "latitude": last.latitude,
                "longitude": last.longitude,
                "satellites": last.satellites,
                "acceleration": list(last.acceleration),
            },
            "series": self._series.snapshot(),
            "history": history,
            "log_lines": self._log.snapshot(),
            "pending": len(self._live_buffer),
            "refreshes": refreshes,
        }
