"""Métricas de ingesta."""

from .ingestion_metrics import (
    DECODE_ERRORS,
    LINES_READ,
    LIVE_BUFFER_DROPPED,
    PERSISTED,
    TRANSPORT_ERRORS,
    render_latest,
)

__all__ = [
    "DECODE_ERRORS",
    "LINES_READ",
    "LIVE_BUFFER_DROPPED",
    "PERSISTED",
    "TRANSPORT_ERRORS",
    "render_latest",
]
