"""
checkhealth/tests/test_goal_store.py

Both store implementations must behave identically; every test runs against
the in-memory store and the SQL store (SQLite file, or TEST_DATABASE_URL).
"""

from datetime import date, datetime, timezone

import pytest

from checkhealth.core.errors import GoalNotFoundError
from checkhealth.features.goals.events import GoalEventPublisher, InMemoryTransport
from checkhealth.features.goals.service import GoalService
from checkhealth.features.goals.store import (
    InMemoryGoalStore,
    SqlGoalStore,
    get_goal_store,
)
from checkhealth.models.goal import (
    Difficulty,
    Frequency,
    Goal,
    GoalCategory,
    GoalStatus,
    GoalType,
    Progress,
    Reward,
)

CREATED = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    if request.param == "memory":
        return InMemoryGoalStore()
    return request.getfixturevalue("sql_store")


def make_goal(**overrides):
    fields = dict(
        user_id="user123",
        title="Sleep 8 hours",
        description="Every night",
        category=GoalCategory.SLEEP,
        type=GoalType.DAILY,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 30),
        frequency=Frequency(periodicity="daily", times_per_period=1),
        difficulty=Difficulty.HARD,
        reward=Reward(points=100, badge="Sleeper"),
        status=GoalStatus.ACTIVE,
        notifications=True,
        created_at=CREATED,
        progress=Progress(completed=0, total=30, unit="days"),
    )
    fields.update(overrides)
    return Goal(**fields)


def test_save_assigns_id_and_round_trips(any_store):
    saved = any_store.save(make_goal())

    assert saved.goal_id is not None
    loaded = any_store.find_by_id(saved.goal_id)
    assert loaded == saved
    assert loaded.created_at == CREATED
    assert loaded.frequency == Frequency(periodicity="daily", times_per_period=1)
    assert loaded.progress == Progress(completed=0, total=30, unit="days")


def test_absent_sub_records_stay_absent(any_store):
    saved = any_store.save(make_goal(frequency=None, reward=None, progress=None, category=None))
    loaded = any_store.find_by_id(saved.goal_id)

    assert loaded.frequency is None
    assert loaded.reward is None
    assert loaded.progress is None
    assert loaded.category is None


def test_save_existing_overwrites(any_store):
    saved = any_store.save(make_goal())
    saved.title = "Sleep 9 hours"
    saved.progress.completed = 5
    any_store.save(saved)

    loaded = any_store.find_by_id(saved.goal_id)
    assert loaded.title == "Sleep 9 hours"
    assert loaded.progress.completed == 5
    assert len(any_store.find_all()) == 1


def test_save_after_delete_raises_not_found(any_store):
    saved = any_store.save(make_goal())
    any_store.delete_by_id(saved.goal_id)

    with pytest.raises(GoalNotFoundError):
        any_store.save(saved)
    assert any_store.find_by_id(saved.goal_id) is None


def test_update_without_status_stores_no_status(any_store):
    service = GoalService(any_store, GoalEventPublisher(InMemoryTransport()))
    created = service.create_goal(make_goal())

    updated = service.update_goal(created.goal_id, Goal(user_id="user123", title="Sleep 9 hours"))

    assert updated.status is None
    assert any_store.find_by_id(created.goal_id).status is None
    assert any_store.find_by_status(GoalStatus.ACTIVE) == []


def test_returned_goals_are_copies(any_store):
    saved = any_store.save(make_goal())
    saved.title = "mutated"
    assert any_store.find_by_id(saved.goal_id).title == "Sleep 8 hours"


def test_exists_and_delete(any_store):
    saved = any_store.save(make_goal())
    assert any_store.exists_by_id(saved.goal_id)

    any_store.delete_by_id(saved.goal_id)

    assert not any_store.exists_by_id(saved.goal_id)
    assert any_store.find_by_id(saved.goal_id) is None


def test_named_queries(any_store):
    a = any_store.save(make_goal(user_id="alice"))
    b = any_store.save(make_goal(user_id="alice", status=GoalStatus.COMPLETED, category=GoalCategory.NUTRITION))
    c = any_store.save(make_goal(user_id="bob", start_date=date(2025, 2, 15)))

    assert [g.goal_id for g in any_store.find_by_user_id("alice")] == [a.goal_id, b.goal_id]
    assert [g.goal_id for g in any_store.find_by_status(GoalStatus.COMPLETED)] == [b.goal_id]
    assert [g.goal_id for g in any_store.find_by_category(GoalCategory.SLEEP)] == [a.goal_id, c.goal_id]
    assert [g.goal_id for g in any_store.find_by_user_id_and_status("alice", GoalStatus.ACTIVE)] == [a.goal_id]
    assert any_store.find_by_user_id_and_status("nobody", GoalStatus.ACTIVE) == []
    assert [g.goal_id for g in any_store.find_by_start_date_between(date(2025, 2, 1), date(2025, 2, 28))] == [c.goal_id]
    assert len(any_store.find_by_start_date_between(date(2025, 1, 1), date(2025, 1, 1))) == 2


def test_clear(any_store):
    any_store.save(make_goal())
    any_store.clear()
    assert any_store.find_all() == []


def test_store_selection_memory(monkeypatch):
    monkeypatch.setenv("GOAL_STORE", "memory")
    assert isinstance(get_goal_store(), InMemoryGoalStore)


def test_store_selection_auto_without_database(monkeypatch):
    monkeypatch.setenv("GOAL_STORE", "auto")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("TEST_DATABASE_URL", raising=False)
    monkeypatch.setattr("checkhealth.core.database.settings.DATABASE_URL", None)
    assert isinstance(get_goal_store(), InMemoryGoalStore)


def test_store_selection_sql(monkeypatch, sql_store):
    monkeypatch.setenv("GOAL_STORE", "sql")
    assert isinstance(get_goal_store(), SqlGoalStore)
