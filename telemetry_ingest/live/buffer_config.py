"""Configuración y estadísticas de los buffers en vivo.

Capacidades por defecto: 128 paquetes pendientes de mostrar,
300 muestras en la serie y 200 líneas de log.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_LIVE_BUFFER_CAPACITY = 128
DEFAULT_LIVE_SERIES_CAPACITY = 300
DEFAULT_LOG_RING_CAPACITY = 200


@dataclass(frozen=True)
class LiveBufferConfig:
    """Capacidades de los buffers entre ingesta y presentación."""
    live_buffer_capacity: int = DEFAULT_LIVE_BUFFER_CAPACITY
    live_series_capacity: int = DEFAULT_LIVE_SERIES_CAPACITY
    log_ring_capacity: int = DEFAULT_LOG_RING_CAPACITY

    @classmethod
    def from_env(cls) -> "LiveBufferConfig":
        return cls(
            live_buffer_capacity=int(
                os.getenv("LIVE_BUFFER_CAPACITY", str(DEFAULT_LIVE_BUFFER_CAPACITY))
            ),
            live_series_capacity=int(
                os.getenv("LIVE_SERIES_CAPACITY", str(DEFAULT_LIVE_SERIES_CAPACITY))
            ),
            log_ring_capacity=int(
                os.getenv("LOG_RING_CAPACITY", str(DEFAULT_LOG_RING_CAPACITY))
            ),
        )


@dataclass
class RingStats:
    """Estadísticas de un ring buffer."""
    offered: int = 0
    taken: int = 0
    evicted: int = 0
    capacity: int = 0
