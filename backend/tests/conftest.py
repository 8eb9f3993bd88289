from pathlib import Path
import pytest
from sqlalchemy import text

from finance.config import DatabaseConfig
from finance.database import open_database


BUNDLED_MIGRATIONS = Path(__file__).resolve().parents[1] / "migrations"


@pytest.fixture
def db_path(tmp_path):
    """Database file inside a directory that does not exist yet."""
    return tmp_path / "data" / "finance.db"


@pytest.fixture
def migrations_dir(tmp_path):
    path = tmp_path / "migrations"
    path.mkdir()
    return path


@pytest.fixture
def write_migration(migrations_dir):
    def _write(name: str, sql: str) -> Path:
        path = migrations_dir / name
        path.write_text(sql, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def db(db_path):
    """An open database with no migrations applied."""
    database = open_database(DatabaseConfig(database_path=str(db_path)))
    yield database
    database.close()


@pytest.fixture
def finance_db(db_path):
    """An open database with the bundled schema applied."""
    database = open_database(DatabaseConfig(
        database_path=str(db_path),
        migrations_path=str(BUNDLED_MIGRATIONS),
    ))
    yield database
    database.close()


def fetch_all(database, sql: str):
    with database.connect() as conn:
        return [tuple(row) for row in conn.execute(text(sql)).all()]
