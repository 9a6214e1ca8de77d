# checkhealth/conftest.py
import sys
import os
import pytest
from pathlib import Path

# Add repo root to PYTHONPATH so `checkhealth.*` imports resolve
REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

# Tests never touch a real database or broker unless a fixture opts in
os.environ.setdefault("GOAL_STORE", "memory")
os.environ.setdefault("EVENT_TRANSPORT", "memory")


@pytest.fixture(scope="function", autouse=True)
def reset_singletons():
    """Each test gets a fresh store and service."""
    from checkhealth.features.goals.service import reset_goal_service
    from checkhealth.features.goals.store import reset_store

    reset_store()
    reset_goal_service()
    yield
    reset_store()
    reset_goal_service()


@pytest.fixture
def store():
    from checkhealth.features.goals.store import InMemoryGoalStore

    return InMemoryGoalStore()


@pytest.fixture
def transport():
    from checkhealth.features.goals.events import InMemoryTransport

    return InMemoryTransport()


@pytest.fixture
def service(store, transport):
    from checkhealth.features.goals.events import GoalEventPublisher
    from checkhealth.features.goals.service import GoalService

    return GoalService(store, GoalEventPublisher(transport))


@pytest.fixture
def client(service):
    """TestClient whose routes use the per-test service."""
    from fastapi.testclient import TestClient
    from checkhealth.features.goals.service import get_goal_service
    from checkhealth.main import app

    app.dependency_overrides[get_goal_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_goal_service, None)


@pytest.fixture
def sql_store(tmp_path):
    """
    SqlGoalStore bound to a throwaway SQLite file.

    Uses TEST_DATABASE_URL instead when it is set, so the same tests can run
    against PostgreSQL.
    """
    from checkhealth.core import database
    from checkhealth.features.goals.store import SqlGoalStore

    url = os.getenv("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'goals.db'}"
    database.init_engine(url)
    database.create_all_tables()
    store = SqlGoalStore()
    store.clear()
    yield store
    database.drop_all_tables()
    database.dispose_engine()
