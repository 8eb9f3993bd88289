"""Database handle and connection bootstrap.

`open_database` prepares the single-file SQLite database: it creates the
parent directory, opens a SQLAlchemy engine whose pool is capped at
`max_connections` (1 by default), pings the database and, when a
migrations directory is configured, applies pending migrations before
returning a `Database` handle.

The engine stays private to the handle. Callers work through `session()`
for SQLModel access, `connect()`/`begin()` for Core statements, and the
introspection helpers (`health`, `version`, `table_exists`).
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool
from sqlmodel import Session, create_engine, select

from . import migrations, models, seed
from .config import DatabaseConfig
from .errors import (
    ConnectionOpenError,
    DatabaseError,
    DirectoryCreationError,
    LivenessCheckError,
    MigrationStatusError,
)

logger = logging.getLogger("finance.database")

LIVENESS_QUERY = "SELECT 1"


def _ping(conn: Connection) -> None:
    conn.execute(text(LIVENESS_QUERY))


def _enable_foreign_keys(dbapi_connection, connection_record):
    # sqlite leaves REFERENCES unenforced unless asked, per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """An open database with its single-connection engine."""

    def __init__(self, engine: Engine):
        self._engine = engine
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def connect(self) -> Connection:
        """Check out the pooled connection for Core statements."""
        return self._engine.connect()

    def begin(self):
        """Context manager yielding a connection inside a transaction."""
        return self._engine.begin()

    def session(self) -> Session:
        """Return a new SQLModel `Session` bound to this database."""
        return Session(self._engine)

    def execute(self, statement: str, params: Optional[Dict[str, Any]] = None) -> int:
        """Run one statement in its own transaction and return the rowcount."""
        with self.begin() as conn:
            result = conn.execute(text(statement), params or {})
            return result.rowcount

    def health(self) -> None:
        """Raise `LivenessCheckError` if the database does not respond."""
        if self._closed:
            raise LivenessCheckError("database handle is closed")
        try:
            with self.connect() as conn:
                _ping(conn)
        except SQLAlchemyError as exc:
            raise LivenessCheckError(str(exc)) from exc

    def table_exists(self, name: str) -> bool:
        """Return True if a table called `name` exists in the schema."""
        query = text("SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=:name")
        try:
            with self.connect() as conn:
                return conn.execute(query, {"name": name}).scalar_one() > 0
        except SQLAlchemyError as exc:
            raise DatabaseError(f"table lookup for {name!r} failed: {exc}") from exc

    def version(self) -> int:
        """Return the number of applied migrations.

        A database that never ran migrations has no tracking table and
        reports version 0.
        """
        if not self.table_exists(migrations.TRACKING_TABLE):
            return 0
        try:
            with self.connect() as conn:
                return conn.execute(
                    text(f"SELECT COUNT(*) FROM {migrations.TRACKING_TABLE}")
                ).scalar_one()
        except SQLAlchemyError as exc:
            raise MigrationStatusError(str(exc)) from exc

    def applied_migrations(self) -> List[models.MigrationRecord]:
        """Return the tracking records ordered by filename."""
        if not self.table_exists(migrations.TRACKING_TABLE):
            return []
        with self.session() as session:
            stmt = select(models.MigrationRecord).order_by(models.MigrationRecord.filename)
            return list(session.exec(stmt).all())

    def _with_driver_connection(self, fn, *args):
        try:
            raw = self._engine.raw_connection()
        except SQLAlchemyError as exc:
            raise ConnectionOpenError(str(exc)) from exc
        try:
            return fn(raw.driver_connection, *args)
        finally:
            raw.close()

    def run_migrations(self, migrations_path: str) -> List[str]:
        """Apply pending migrations and return the filenames applied."""
        return self._with_driver_connection(migrations.apply_migrations, migrations_path)

    def pending_migrations(self, migrations_path: str) -> List[str]:
        """Return the filenames that `run_migrations` would apply."""
        return self._with_driver_connection(migrations.pending_migrations, migrations_path)

    def seed_default_categories(self, user_id: int, categories=None) -> List[models.Category]:
        """Insert the default category set for `user_id`; see `finance.seed`."""
        return seed.seed_default_categories(self, user_id, categories)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._engine.dispose()


def open_database(config: DatabaseConfig) -> Database:
    """Open (creating if needed) the database described by `config`.

    Raises a `DatabaseError` subclass naming the failed stage. No handle
    is returned on failure and the engine is disposed.
    """
    db_path = Path(config.database_path)
    try:
        db_path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(f"{db_path.parent}: {exc}") from exc

    try:
        engine = create_engine(
            f"sqlite:///{db_path}",
            echo=False,
            poolclass=QueuePool,
            pool_size=config.max_connections,
            max_overflow=0,
            connect_args={"check_same_thread": False},
        )
    except SQLAlchemyError as exc:
        raise ConnectionOpenError(f"{db_path}: {exc}") from exc
    event.listen(engine, "connect", _enable_foreign_keys)

    try:
        conn = engine.connect()
    except SQLAlchemyError as exc:
        engine.dispose()
        raise ConnectionOpenError(f"{db_path}: {exc}") from exc

    try:
        with conn:
            _ping(conn)
    except SQLAlchemyError as exc:
        engine.dispose()
        raise LivenessCheckError(f"{db_path}: {exc}") from exc

    db = Database(engine)
    if config.migrations_path:
        try:
            applied = db.run_migrations(config.migrations_path)
        except DatabaseError:
            db.close()
            raise
        logger.info("database ready at %s (%d migrations applied)", db_path, len(applied))
    else:
        logger.info("database ready at %s (migrations disabled)", db_path)
    return db
