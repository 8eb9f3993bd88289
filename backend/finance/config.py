"""Application settings and validation."""

import os
from pathlib import Path

from pydantic import BaseModel, Field

BASE = Path(__file__).resolve().parent.parent


class DatabaseConfig(BaseModel):
    """Inputs for `open_database`.

    `migrations_path` may be empty, in which case no migrations run.
    `max_connections` caps the pool; the default of 1 serializes all
    access to the single-file database.
    """
    database_path: str
    migrations_path: str = ""
    max_connections: int = Field(default=1, ge=1)


class Settings:
    ENV: str
    DATABASE_PATH: str
    MIGRATIONS_PATH: str
    DB_MAX_CONNECTIONS: int
    LOG_LEVEL: str
    ALLOW_DEV_CORS: bool

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_PATH = os.getenv("DATABASE_PATH", str(BASE / "data" / "finance.db"))
        # empty string disables migrations at startup
        self.MIGRATIONS_PATH = os.getenv("MIGRATIONS_PATH", str(BASE / "migrations"))
        # SQLite allows one writer; keep a single pooled connection
        self.DB_MAX_CONNECTIONS = int(os.getenv("DB_MAX_CONNECTIONS", "1"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self._validate()

    def _validate(self):
        if not self.DATABASE_PATH.strip():
            raise RuntimeError("DATABASE_PATH must not be empty")
        if self.DB_MAX_CONNECTIONS < 1:
            raise RuntimeError("DB_MAX_CONNECTIONS must be at least 1")

    def database_config(self) -> DatabaseConfig:
        """Build the `DatabaseConfig` used to open the database."""
        return DatabaseConfig(
            database_path=self.DATABASE_PATH,
            migrations_path=self.MIGRATIONS_PATH,
            max_connections=self.DB_MAX_CONNECTIONS,
        )


def get_settings() -> Settings:
    """Read settings from the current environment."""
    return Settings()
