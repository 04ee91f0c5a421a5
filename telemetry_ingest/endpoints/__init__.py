"""Módulo de endpoints HTTP.

Contiene los endpoints de operador organizados por función.
"""

from .health import router as health_router
from .packets import router as packets_router
from .exports import router as exports_router
from .live import router as live_router

__all__ = [
    "health_router",
    "packets_router",
    "exports_router",
    "live_router",
]
