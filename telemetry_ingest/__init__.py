"""Serial telemetry ingestion, live buffering, persistence and export."""

__version__ = "0.1.0"
