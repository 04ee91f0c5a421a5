"""Prometheus metrics for the ingestion pipeline.

Counters are process-wide (default registry); components also keep their
own in-process stats for the diagnostics endpoints.
"""

from __future__ import annotations

from typing import Tuple

from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

LINES_READ = Counter(
    "telemetry_lines_read_total",
    "Lines read from the device transport",
)
DECODE_ERRORS = Counter(
    "telemetry_decode_errors_total",
    "Lines discarded because they could not be decoded",
    ["kind"],  # empty, structure, number, acceleration
)
TRANSPORT_ERRORS = Counter(
    "telemetry_transport_errors_total",
    "Failed reads from the device transport",
)
LIVE_BUFFER_DROPPED = Counter(
    "telemetry_live_buffer_dropped_total",
    "Packets evicted from the live buffer before being displayed",
)
PERSISTED = Counter(
    "telemetry_persist_total",
    "Background inserts by outcome",
    ["status"],  # success, failed
)


def render_latest() -> Tuple[bytes, str]:
    """Exposition payload and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
