"""Exception types raised by the persistence layer.

Every error carries the `stage` that failed. Migration errors also carry
the offending `filename` when one is known, so a failed startup can be
diagnosed from the message alone. The driver or OS exception that caused
the failure is chained as `__cause__`.
"""

from typing import Optional


class DatabaseError(Exception):
    """Base class for all persistence failures."""
    stage = "database"

    def __init__(self, message: str):
        super().__init__(f"{self.stage}: {message}")


class DirectoryCreationError(DatabaseError):
    stage = "create database directory"


class ConnectionOpenError(DatabaseError):
    stage = "open database"


class LivenessCheckError(DatabaseError):
    stage = "ping database"


class MigrationError(DatabaseError):
    """A migration run failed; `filename` names the file when known."""
    stage = "run migrations"

    def __init__(self, message: str, filename: Optional[str] = None):
        self.filename = filename
        if filename:
            message = f"{filename}: {message}"
        super().__init__(message)


class TrackingTableError(MigrationError):
    stage = "create migrations table"


class DirectoryListError(MigrationError):
    stage = "read migrations directory"


class MigrationStatusError(MigrationError):
    stage = "check migration status"


class FileReadError(MigrationError):
    stage = "read migration file"


class TransactionBeginError(MigrationError):
    stage = "begin migration transaction"


class StatementExecutionError(MigrationError):
    stage = "execute migration"


class TransactionCommitError(MigrationError):
    stage = "commit migration"


class TrackingRecordInsertError(MigrationError):
    stage = "record migration"


class SeedError(DatabaseError):
    stage = "seed categories"
