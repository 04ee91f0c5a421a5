from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_db_engine(
    url: Optional[str] = None,
    settings: Optional[Settings] = None,
    check_connection: bool = True,
) -> Engine:
    """Create the process-wide engine; its pool is shared by every operation."""
    settings = settings or get_settings()
    url = url or settings.database_url
    parsed = make_url(url)

    # Log básico de parámetros de conexión (sin contraseña)
    logger.info(
        "[DB] Crear engine driver=%s host=%s port=%s db=%s user=%s",
        parsed.drivername,
        parsed.host,
        parsed.port,
        parsed.database,
        parsed.username,
    )

    if parsed.get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            future=True,
        )
    else:
        engine = create_engine(
            url,
            pool_size=settings.db_pool_size,
            max_overflow=0,
            pool_recycle=settings.db_pool_recycle_seconds,
            pool_pre_ping=True,
            future=True,
        )

    if check_connection:
        # Test de conexión: un fallo aquí solo se registra, la ingesta sigue sin BD
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("[DB] Test de conexión OK")
        except Exception:
            logger.exception("[DB] Test de conexión FALLÓ")

    return engine
