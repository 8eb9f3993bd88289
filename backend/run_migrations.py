"""Apply the SQL files in migrations/ to the configured SQLite database.

Paths come from the DATABASE_PATH and MIGRATIONS_PATH environment
variables (see `finance.config`). Pass --check to list pending files
without applying them.
"""
import sys

from finance.config import get_settings
from finance.database import open_database
from finance.errors import DatabaseError


def run(check: bool = False) -> int:
    """Apply pending migrations in lexical order and report the result.

    Returns the process exit code.
    """
    settings = get_settings()
    print("Using database:", settings.DATABASE_PATH)
    if not settings.MIGRATIONS_PATH:
        print("MIGRATIONS_PATH is empty, nothing to do.")
        return 0
    # open without migrations so --check stays read-only
    config = settings.database_config().model_copy(update={"migrations_path": ""})
    try:
        with open_database(config) as db:
            if check:
                pending = db.pending_migrations(settings.MIGRATIONS_PATH)
                for name in pending:
                    print("Pending:", name)
                print(f"{len(pending)} pending migration(s).")
                return 0
            for name in db.run_migrations(settings.MIGRATIONS_PATH):
                print("Applied:", name)
            print("Migrations applied. Schema version:", db.version())
    except DatabaseError as exc:
        print("Migration failed:", exc, file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(run(check="--check" in sys.argv[1:]))
