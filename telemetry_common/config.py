from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv

DEFAULT_EXPORT_PREFIX = "komkomunikacijos_data"


@dataclass(frozen=True)
class Settings:
    database_url_override: Optional[str]
    db_driver: str
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str
    db_pool_size: int
    db_pool_recycle_seconds: int

    export_dir: str
    export_prefix: str
    persist_workers: int
    log_level: str

    @property
    def database_url(self) -> str:
        """DATABASE_URL when set, otherwise assembled from the DB_* parts."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"{self.db_driver}://{quote_plus(self.db_user)}:{quote_plus(self.db_password)}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("TELEMETRY_ENV_FILE", ".env")
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    return Settings(
        database_url_override=os.getenv("DATABASE_URL") or None,
        db_driver=os.getenv("DB_DRIVER", "mysql+pymysql"),
        db_host=os.getenv("DB_HOST", "127.0.0.1"),
        db_port=int(os.getenv("DB_PORT", "3306")),
        db_user=os.getenv("DB_USER", "root"),
        db_password=os.getenv("DB_PASSWORD", ""),
        db_name=os.getenv("DB_NAME", "komkomunikacijos"),
        db_pool_size=int(os.getenv("DB_POOL_SIZE", "25")),
        db_pool_recycle_seconds=int(os.getenv("DB_POOL_RECYCLE_SECONDS", "300")),
        export_dir=os.getenv("EXPORT_DIR", "."),
        export_prefix=os.getenv("EXPORT_PREFIX", DEFAULT_EXPORT_PREFIX),
        persist_workers=int(os.getenv("PERSIST_WORKERS", "4")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
