"""File-based migration runner for the SQLite database.

Migrations are `*.sql` files in a single directory. They are applied in
ascending filename order, so names should carry a sortable prefix such as
`001_init.sql`, `002_seed.sql`. Each applied file is recorded in the
`migrations` table and is never executed again.

Each file runs inside its own transaction together with the insert of its
tracking record: either both commit or neither does. A failing file stops
the run; files committed before it stay applied.

The runner drives the `sqlite3` connection directly because a migration
file is a multi-statement script (`executescript`). The connection is
switched to sqlite's native autocommit mode for the duration of the run so
that `BEGIN`/`COMMIT` are issued explicitly and `executescript` does not
commit on its own.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List, Union

from .errors import (
    DirectoryListError,
    FileReadError,
    MigrationError,
    MigrationStatusError,
    StatementExecutionError,
    TrackingRecordInsertError,
    TrackingTableError,
    TransactionBeginError,
    TransactionCommitError,
)

logger = logging.getLogger("finance.migrations")

MIGRATION_SUFFIX = ".sql"
TRACKING_TABLE = "migrations"

CREATE_TRACKING_TABLE = f"""
CREATE TABLE IF NOT EXISTS {TRACKING_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT UNIQUE NOT NULL,
    executed_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""


class MigrationFile:
    """A migration script found on disk.

    `name` is both the identity (matched against the tracking table) and
    the sort key. Content is read lazily, only when the file is applied.
    """

    def __init__(self, path: Path):
        self.path = path
        self.name = path.name

    def read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadError(str(exc), filename=self.name) from exc

    def __repr__(self) -> str:
        return f"MigrationFile({self.name!r})"


def discover_migrations(migrations_path: Union[str, Path]) -> List[MigrationFile]:
    """Return the `*.sql` files in `migrations_path`, sorted by name.

    A missing directory yields an empty list. Directories and entries that
    are not regular files are ignored.
    """
    directory = Path(migrations_path)
    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        logger.info("migrations directory %s does not exist, nothing to apply", directory)
        return []
    except OSError as exc:
        raise DirectoryListError(f"{directory}: {exc}") from exc

    files = [
        MigrationFile(entry)
        for entry in entries
        if entry.name.endswith(MIGRATION_SUFFIX) and entry.is_file()
    ]
    files.sort(key=lambda m: m.name)
    return files


def ensure_tracking_table(conn: sqlite3.Connection) -> None:
    try:
        conn.execute(CREATE_TRACKING_TABLE)
    except sqlite3.Error as exc:
        raise TrackingTableError(str(exc)) from exc


def is_applied(conn: sqlite3.Connection, filename: str) -> bool:
    """Return True if a tracking record exists for `filename`."""
    try:
        row = conn.execute(
            f"SELECT COUNT(*) FROM {TRACKING_TABLE} WHERE filename = ?", (filename,)
        ).fetchone()
    except sqlite3.Error as exc:
        raise MigrationStatusError(str(exc), filename=filename) from exc
    return row[0] > 0


def _rollback(conn: sqlite3.Connection, filename: str) -> None:
    if not conn.in_transaction:
        return
    try:
        conn.execute("ROLLBACK")
    except sqlite3.Error:
        logger.exception("rollback of %s failed", filename)


def apply_migration(conn: sqlite3.Connection, migration: MigrationFile) -> None:
    """Run one migration and record it, in a single transaction.

    The transaction is rolled back on every failure path; the raised
    error names the file and the stage that failed.
    """
    content = migration.read()
    try:
        conn.execute("BEGIN")
    except sqlite3.Error as exc:
        raise TransactionBeginError(str(exc), filename=migration.name) from exc

    try:
        try:
            conn.executescript(content)
        except sqlite3.Error as exc:
            raise StatementExecutionError(str(exc), filename=migration.name) from exc
        if not conn.in_transaction:
            # a COMMIT or ROLLBACK inside the file; its record can no longer be atomic
            raise StatementExecutionError("migration ended its own transaction", filename=migration.name)
        try:
            conn.execute(
                f"INSERT INTO {TRACKING_TABLE} (filename) VALUES (?)", (migration.name,)
            )
        except sqlite3.Error as exc:
            raise TrackingRecordInsertError(str(exc), filename=migration.name) from exc
        try:
            conn.execute("COMMIT")
        except sqlite3.Error as exc:
            raise TransactionCommitError(str(exc), filename=migration.name) from exc
    except MigrationError:
        _rollback(conn, migration.name)
        raise


def apply_migrations(conn: sqlite3.Connection, migrations_path: Union[str, Path]) -> List[str]:
    """Apply every pending migration in `migrations_path`.

    Returns the filenames applied by this call, in order. Running it again
    against the same directory applies nothing and returns an empty list.
    """
    previous = conn.autocommit
    conn.autocommit = True
    try:
        ensure_tracking_table(conn)
        applied = []
        for migration in discover_migrations(migrations_path):
            if is_applied(conn, migration.name):
                logger.debug("migration already applied: %s", migration.name)
                continue
            try:
                apply_migration(conn, migration)
            except MigrationError as exc:
                logger.error("migration failed: %s", exc)
                raise
            logger.info("migration executed: %s", migration.name)
            applied.append(migration.name)
        return applied
    finally:
        conn.autocommit = previous


def pending_migrations(conn: sqlite3.Connection, migrations_path: Union[str, Path]) -> List[str]:
    """Return the filenames in `migrations_path` not yet recorded as applied.

    Read-only: the tracking table is not created when missing.
    """
    try:
        exists = conn.execute(
            "SELECT COUNT(*) FROM sqlite_master WHERE type='table' AND name=?", (TRACKING_TABLE,)
        ).fetchone()[0]
    except sqlite3.Error as exc:
        raise MigrationStatusError(str(exc)) from exc
    names = [m.name for m in discover_migrations(migrations_path)]
    if not exists:
        return names
    return [name for name in names if not is_applied(conn, name)]
