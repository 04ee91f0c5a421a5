"""Export of stored packets to CSV or JSON files.

Files are named ``<prefix>_<YYYYMMDD_HHMMSS>.<csv|json>``; two exports of
the same format within one second resolve to the same name and the later
one overwrites the earlier.
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..core.domain.packet import StoredPacket
from ..errors import ExportError
from ..infrastructure.persistence.packet_store import PacketStore

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "ID", "Time", "Latitude", "Longitude", "Satellites",
    "AccelerationX", "AccelerationY", "AccelerationZ",
    "CreatedAt", "UpdatedAt",
]
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"


@dataclass(frozen=True)
class ExportResult:
    path: Path
    format: ExportFormat
    rows: int


def generate_export_filename(
    fmt: Union[ExportFormat, str],
    prefix: str,
    now: Optional[datetime] = None,
) -> str:
    fmt = ExportFormat(fmt)
    timestamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.{fmt.value}"


def _format_ts(value: Optional[datetime]) -> str:
    return value.strftime(TIMESTAMP_FORMAT) if value else ""


def csv_row(packet: StoredPacket) -> List[str]:
    return [
        str(packet.id),
        packet.time,
        f"{packet.latitude:.6f}",
        f"{packet.longitude:.6f}",
        str(packet.satellites),
        f"{packet.acceleration_x:.3f}",
        f"{packet.acceleration_y:.3f}",
        f"{packet.acceleration_z:.3f}",
        _format_ts(packet.created_at),
        _format_ts(packet.updated_at),
    ]


def write_csv(fh, packets: Iterable[StoredPacket]) -> int:
    writer = csv.writer(fh)
    writer.writerow(CSV_HEADER)
    rows = 0
    for packet in packets:
        writer.writerow(csv_row(packet))
        rows += 1
    return rows


def write_json(fh, packets: Iterable[StoredPacket]) -> int:
    records = [p.to_dict() for p in packets]
    json.dump(records, fh, indent=2, ensure_ascii=False)
    fh.write("\n")
    return len(records)


_WRITERS = {
    ExportFormat.CSV: write_csv,
    ExportFormat.JSON: write_json,
}


class PacketExporter:
    """Serializa un snapshot del store a un archivo plano."""

    def __init__(
        self,
        store: PacketStore,
        output_dir: Union[str, Path] = ".",
        prefix: str = "komkomunikacijos_data",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._output_dir = Path(output_dir)
        self._prefix = prefix
        self._clock = clock

    def export(self, fmt: Union[ExportFormat, str], limit: int = 0) -> ExportResult:
        """Write the ``store.list(limit)`` snapshot (0 = all) to a new file.

        Raises:
            ValueError: unknown format.
            StoreError: the snapshot query failed.
            ExportError: the file could not be written.
        """
        fmt = ExportFormat(fmt)
        packets = self._store.list(limit)

        path = self._output_dir / generate_export_filename(fmt, self._prefix, self._clock())
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            # newline="" lets the csv module control row terminators
            with open(path, "w", encoding="utf-8", newline="") as fh:
                rows = _WRITERS[fmt](fh, packets)
        except (OSError, UnicodeError, TypeError, ValueError) as e:
            if path.is_file():
                path.unlink()
            logger.error("[EXPORT] Failed to write %s: %s", path, e)
            raise ExportError(f"failed to write {fmt.value} export {path.name}: {e}") from e

        logger.info("[EXPORT] Data saved to: %s (%d rows)", path, rows)
        return ExportResult(path=path, format=fmt, rows=rows)

    def export_csv(self, limit: int = 0) -> ExportResult:
        return self.export(ExportFormat.CSV, limit)

    def export_json(self, limit: int = 0) -> ExportResult:
        return self.export(ExportFormat.JSON, limit)
