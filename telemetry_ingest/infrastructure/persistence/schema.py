"""Esquema de la tabla ``packets``.

MySQL (production) is created from the SQL file in ``migrations/`` so the
``ON UPDATE CURRENT_TIMESTAMP`` clause is kept verbatim; other backends
(SQLite for development and tests) use the SQLAlchemy table below.
Schema evolution is handled outside this service.
"""

from __future__ import annotations

import logging
import pathlib

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    text,
)
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = pathlib.Path(__file__).parent / "migrations"

metadata = MetaData()

packets_table = Table(
    "packets",
    metadata,
    Column("id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True),
    Column("time", String(255), nullable=False),
    Column("latitude", Float(precision=53), nullable=False),
    Column("longitude", Float(precision=53), nullable=False),
    Column("satellites", Integer, nullable=False),
    Column("acceleration_x", Float(precision=53), nullable=False),
    Column("acceleration_y", Float(precision=53), nullable=False),
    Column("acceleration_z", Float(precision=53), nullable=False),
    Column("created_at", DateTime, server_default=text("CURRENT_TIMESTAMP")),
    Column("updated_at", DateTime, server_default=text("CURRENT_TIMESTAMP")),
    Index("idx_time", "time"),
    Index("idx_coordinates", "latitude", "longitude"),
    Index("idx_created_at", "created_at"),
    # ids are never reused, even after a bulk delete
    sqlite_autoincrement=True,
)


def ensure_schema(engine: Engine) -> None:
    """Create the ``packets`` table if missing. Safe to call multiple times."""
    logger.info("[DB] Ensuring schema exists (dialect=%s)", engine.dialect.name)

    if engine.dialect.name != "mysql":
        metadata.create_all(engine, checkfirst=True)
        return

    sql_file = MIGRATIONS_DIR / "mysql_001_create_packets.sql"
    statements = [s.strip() for s in sql_file.read_text().split(";") if s.strip()]
    try:
        with engine.begin() as conn:
            for statement in statements:
                conn.execute(text(statement))
        logger.info("[DB] Schema creation completed successfully")
    except Exception as e:
        logger.exception("[DB] Schema creation failed: %s", e)
        raise
