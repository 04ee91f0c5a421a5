"""Export engine (CSV / JSON)."""

from .exporter import (
    CSV_HEADER,
    ExportFormat,
    ExportResult,
    PacketExporter,
    generate_export_filename,
)

__all__ = [
    "CSV_HEADER",
    "ExportFormat",
    "ExportResult",
    "PacketExporter",
    "generate_export_filename",
]
