import pytest
from fastapi.testclient import TestClient

from finance.database import Database
from finance.errors import LivenessCheckError
from finance.main import app


@pytest.fixture
def client(monkeypatch, db_path):
    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    monkeypatch.delenv("MIGRATIONS_PATH", raising=False)
    with TestClient(app) as c:
        yield c


def test_home_placeholder(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"message": "Hello, World!"}


def test_home_rejects_other_methods(client):
    r = client.post("/")
    assert r.status_code == 405


def test_health_reports_schema_version(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["schema_version"] >= 1
    assert "X-Request-ID" in r.headers


def test_request_id_is_propagated(client):
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"


def test_health_returns_503_when_database_is_down(client, monkeypatch):
    def down(self):
        raise LivenessCheckError("database is locked")

    monkeypatch.setattr(Database, "health", down)
    r = client.get("/health")
    assert r.status_code == 503
    assert "ping database" in r.json()["detail"]


def test_startup_without_migrations(monkeypatch, db_path):
    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    monkeypatch.setenv("MIGRATIONS_PATH", "")
    with TestClient(app) as c:
        r = c.get("/health")
    assert r.status_code == 200
    assert r.json()["schema_version"] == 0
