"""Infraestructura de persistencia (SQLAlchemy)."""

from .packet_store import SERIES_FIELDS, PacketStore
from .schema import ensure_schema, packets_table

__all__ = ["PacketStore", "SERIES_FIELDS", "ensure_schema", "packets_table"]
