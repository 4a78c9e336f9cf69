"""Store configuration and adapter factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recordstore.persistence.sql import SQLAdapter


@dataclass
class StoreConfig:
    """Runtime configuration, read from the environment.

    Supports sqlite:/// and postgresql:// database URL schemes.
    """

    database_url: str
    metadata_path: Path
    default_adapter: str = "sql"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> StoreConfig:
        """Create config from environment variables.

        Database URL resolution order:
        1. DATABASE_URL env var (standard)
        2. RECORDSTORE_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/recordstore.db
        4. Default without base_path: sqlite:///recordstore.db
        """
        base = base_path or Path.cwd()
        metadata_path = Path(
            os.environ.get("RECORDSTORE_METADATA_PATH", base / "metadata")
        )
        return cls(
            database_url=cls._database_url(base_path),
            metadata_path=metadata_path,
            default_adapter=os.environ.get("RECORDSTORE_DEFAULT_ADAPTER", "sql"),
            log_level=os.environ.get("RECORDSTORE_LOG_LEVEL", "WARNING").upper(),
        )

    @staticmethod
    def _database_url(base_path: Path | None) -> str:
        url = os.environ.get("DATABASE_URL")
        if url:
            return url

        db_path = os.environ.get("RECORDSTORE_DB_PATH")
        if db_path:
            return f"sqlite:///{db_path}"

        if base_path:
            return f"sqlite:///{base_path / 'data' / 'recordstore.db'}"

        return "sqlite:///recordstore.db"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.database_url.startswith("postgresql")

    @property
    def sqlalchemy_url(self) -> str:
        """URL suitable for SQLAlchemy engine creation.

        Ensures postgresql:// URLs use the psycopg (v3) driver.
        """
        if self.database_url.startswith("postgresql://"):
            return self.database_url.replace("postgresql://", "postgresql+psycopg://", 1)
        return self.database_url


def create_adapter(config: StoreConfig) -> SQLAdapter:
    """Create the SQL adapter for the configured database URL.

    Returns:
        An SQLAdapter instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite or config.is_postgresql:
        from recordstore.persistence.sql import SQLAdapter

        return SQLAdapter(config.sqlalchemy_url)

    raise ValueError(f"Unsupported database URL scheme: {config.database_url}")
