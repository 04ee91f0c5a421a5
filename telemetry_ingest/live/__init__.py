"""Live layer - buffers entre ingesta y presentación."""

from .buffer_config import LiveBufferConfig, RingStats
from .live_view import LiveView, format_log_line
from .ring_buffer import RingBuffer

__all__ = [
    "LiveBufferConfig",
    "LiveView",
    "RingBuffer",
    "RingStats",
    "format_log_line",
]
