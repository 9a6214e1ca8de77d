from fastapi.testclient import TestClient

import checkhealth.api.health as health_api
from checkhealth.features.goals.store import InMemoryGoalStore, SqlGoalStore
from checkhealth.main import app

client = TestClient(app)


def test_healthz_always_ok():
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json().get("status") == "ok"


def test_readyz_ok_with_memory_store(monkeypatch):
    monkeypatch.setattr(health_api, "get_store", lambda: InMemoryGoalStore())

    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "store": "memory"}


def test_readyz_ok_with_sql_store(sql_store, monkeypatch):
    monkeypatch.setattr(health_api, "get_store", lambda: sql_store)

    resp = client.get("/readyz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "store": "sql"}


def test_readyz_handles_db_down(monkeypatch):
    def boom():
        raise RuntimeError("db down")

    monkeypatch.setattr(health_api, "get_store", lambda: SqlGoalStore())
    monkeypatch.setattr(health_api, "get_engine", boom)

    resp = client.get("/readyz")
    body = resp.json()
    assert resp.status_code == 503
    assert body.get("status") == "error"
    assert "database" in body.get("detail", "")


def test_readyz_reports_missing_table(monkeypatch):
    class FakeConn:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

        def exec_driver_sql(self, query):
            return None

    class FakeEngine:
        def connect(self):
            return FakeConn()

    class FakeInspector:
        def has_table(self, name):
            return False

    monkeypatch.setattr(health_api, "get_store", lambda: SqlGoalStore())
    monkeypatch.setattr(health_api, "get_engine", lambda: FakeEngine())
    monkeypatch.setattr(health_api, "inspect", lambda engine: FakeInspector())

    resp = client.get("/readyz")
    assert resp.status_code == 503
    assert "goals" in resp.json()["detail"]
