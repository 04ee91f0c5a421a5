"""Packet store - persistencia durable de paquetes decodificados.

Every operation is one statement in its own transaction and is safe to
call from any thread: the engine's pool is the only shared resource.
There is no internal retry; callers decide. A ``count()`` racing with
in-flight background inserts may briefly under-report.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import DateTime, text
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import SQLAlchemyError

from ...core.domain.packet import Packet, StoredPacket
from ...core.parsing.packet_decoder import MAX_COUNT
from ...errors import DecodeError, DecodeErrorKind, StoreError

logger = logging.getLogger(__name__)

# Scalar fields a series can be projected from; never user text in SQL.
SERIES_FIELDS = (
    "latitude",
    "longitude",
    "satellites",
    "acceleration_x",
    "acceleration_y",
    "acceleration_z",
)

_SELECT_PACKETS = """
    SELECT id, time, latitude, longitude, satellites,
           acceleration_x, acceleration_y, acceleration_z,
           created_at, updated_at
    FROM packets
"""


def _typed(sql: str):
    return text(sql).columns(created_at=DateTime, updated_at=DateTime)


def _row_to_packet(row: Row) -> StoredPacket:
    m = row._mapping
    return StoredPacket(
        id=int(m["id"]),
        time=m["time"],
        latitude=float(m["latitude"]),
        longitude=float(m["longitude"]),
        satellites=int(m["satellites"]),
        acceleration_x=float(m["acceleration_x"]),
        acceleration_y=float(m["acceleration_y"]),
        acceleration_z=float(m["acceleration_z"]),
        created_at=m["created_at"],
        updated_at=m["updated_at"],
    )


def _validate(packet: Packet) -> None:
    if len(packet.acceleration) != 3:
        raise DecodeError(
            DecodeErrorKind.ACCELERATION,
            f"expected 3 acceleration components, got {len(packet.acceleration)}",
        )
    if packet.satellites < 0:
        raise DecodeError(DecodeErrorKind.NUMBER, "negative satellite count")
    if packet.satellites > MAX_COUNT:
        raise DecodeError(DecodeErrorKind.NUMBER, "satellite count exceeds INT range")


class PacketStore:
    """Append-only table of packets with read, aggregate and delete."""

    def __init__(self, engine: Engine):
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def insert(self, packet: Packet) -> int:
        """Append one packet.

        Returns:
            The store-assigned id.

        Raises:
            DecodeError: the packet breaks a record invariant.
            StoreError: the insert failed.
        """
        _validate(packet)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(
                    text(
                        """
                        INSERT INTO packets (
                            time, latitude, longitude, satellites,
                            acceleration_x, acceleration_y, acceleration_z
                        ) VALUES (
                            :time, :latitude, :longitude, :satellites,
                            :acceleration_x, :acceleration_y, :acceleration_z
                        )
                        """
                    ),
                    packet.to_insert_params(),
                )
                packet_id = int(result.lastrowid)
        except SQLAlchemyError as e:
            raise StoreError(f"failed to insert packet: {e}") from e

        logger.debug("[STORE] Inserted packet id=%d time=%s", packet_id, packet.time)
        return packet_id

    def list(self, limit: int = 0) -> List[StoredPacket]:
        """Packets newest first; ``limit <= 0`` returns all of them."""
        sql = _SELECT_PACKETS + " ORDER BY created_at DESC, id DESC"
        params = {}
        if limit > 0:
            sql += " LIMIT :limit"
            params["limit"] = int(limit)

        try:
            with self._engine.connect() as conn:
                rows = conn.execute(_typed(sql), params).fetchall()
        except SQLAlchemyError as e:
            raise StoreError(f"failed to query packets: {e}") from e
        return [_row_to_packet(r) for r in rows]

    def latest(self) -> Optional[StoredPacket]:
        """Most recent packet, or None when the store is empty."""
        sql = _SELECT_PACKETS + " ORDER BY created_at DESC, id DESC LIMIT 1"
        try:
            with self._engine.connect() as conn:
                row = conn.execute(_typed(sql)).fetchone()
        except SQLAlchemyError as e:
            raise StoreError(f"failed to get latest packet: {e}") from e
        return _row_to_packet(row) if row is not None else None

    def count(self) -> int:
        try:
            with self._engine.connect() as conn:
                return int(conn.execute(text("SELECT COUNT(*) FROM packets")).scalar_one())
        except SQLAlchemyError as e:
            raise StoreError(f"failed to get packet count: {e}") from e

    def delete_all(self) -> None:
        """Irreversible bulk delete. Only for explicit, confirmed requests."""
        try:
            with self._engine.begin() as conn:
                result = conn.execute(text("DELETE FROM packets"))
        except SQLAlchemyError as e:
            raise StoreError(f"failed to delete all packets: {e}") from e
        logger.warning("[STORE] Deleted all packets (rows=%s)", result.rowcount)

    def series_of(self, field: str = "acceleration_z", limit: int = 0) -> List[float]:
        """One scalar field in chronological order (oldest first).

        Unlike ``list`` this is ascending: it rebuilds a historical chart.
        ``limit > 0`` keeps the first ``limit`` rows.

        Raises:
            ValueError: ``field`` is not one of SERIES_FIELDS.
            StoreError: the query failed.
        """
        if field not in SERIES_FIELDS:
            raise ValueError(f"unknown series field {field!r}; expected one of {SERIES_FIELDS}")

        sql = f"SELECT {field} FROM packets ORDER BY created_at ASC, id ASC"
        params = {}
        if limit > 0:
            sql += " LIMIT :limit"
            params["limit"] = int(limit)

        try:
            with self._engine.connect() as conn:
                rows = conn.execute(text(sql), params).fetchall()
        except SQLAlchemyError as e:
            raise StoreError(f"failed to query {field} series: {e}") from e
        return [float(r[0]) for r in rows]
