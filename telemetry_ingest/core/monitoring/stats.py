"""Estadísticas del loop de ingesta."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class IngestStats:
    """Contadores de líneas leídas, decodificadas y descartadas."""

    lines_read: int = 0
    decoded: int = 0
    decode_errors: int = 0
    transport_errors: int = 0
    live_dropped: int = 0
    persist_submitted: int = 0
    last_packet_at: float = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return (
            f"Stats: read={self.lines_read} decoded={self.decoded} "
            f"decode_errors={self.decode_errors} transport_errors={self.transport_errors} "
            f"live_dropped={self.live_dropped}"
        )

    def to_dict(self) -> dict:
        """Convierte a diccionario."""
        return {
            "lines_read": self.lines_read,
            "decoded": self.decoded,
            "decode_errors": self.decode_errors,
            "transport_errors": self.transport_errors,
            "live_dropped": self.live_dropped,
            "persist_submitted": self.persist_submitted,
            "last_packet_at": self.last_packet_at,
            "started_at": self.started_at.isoformat(),
            "decode_success_rate": self._success_rate(),
        }

    def _success_rate(self) -> float:
        """Calcula tasa de éxito del decoder."""
        total = self.decoded + self.decode_errors
        if total == 0:
            return 1.0
        return self.decoded / total
