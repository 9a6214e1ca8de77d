"""
checkhealth/features/goals/store.py

Persistence port for goals plus its two implementations:
- InMemoryGoalStore: process-local dict, used in development and tests
- SqlGoalStore: SQLAlchemy Core against the `goals` table

Both return copies, never live references, so callers cannot mutate stored
state without going through save(). Both store fields as given (a missing
status stays missing) and raise GoalNotFoundError when saving a goal whose id
no longer exists.
"""

from __future__ import annotations

import copy
import logging
import os
from abc import ABC, abstractmethod
from datetime import date, timezone
from itertools import count
from typing import Dict, List, Optional

from sqlalchemy import select, insert, update, delete, and_

from checkhealth.core.config import settings
from checkhealth.core.database import get_db_session, goals
from checkhealth.core.errors import GoalNotFoundError
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

logger = logging.getLogger("checkhealth")


class GoalStore(ABC):
    """Narrow persistence port for the Goal aggregate."""

    @abstractmethod
    def save(self, goal: Goal) -> Goal:
        """Insert (goal_id is None) or overwrite; returns the stored goal with its id."""

    @abstractmethod
    def find_by_id(self, goal_id: int) -> Optional[Goal]:
        pass

    @abstractmethod
    def find_all(self) -> List[Goal]:
        pass

    @abstractmethod
    def exists_by_id(self, goal_id: int) -> bool:
        pass

    @abstractmethod
    def delete_by_id(self, goal_id: int) -> None:
        pass

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> List[Goal]:
        pass

    @abstractmethod
    def find_by_status(self, status: GoalStatus) -> List[Goal]:
        pass

    @abstractmethod
    def find_by_category(self, category: GoalCategory) -> List[Goal]:
        pass

    @abstractmethod
    def find_by_user_id_and_status(self, user_id: str, status: GoalStatus) -> List[Goal]:
        pass

    @abstractmethod
    def find_by_start_date_between(self, start: date, end: date) -> List[Goal]:
        """Goals whose start_date lies in [start, end]."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every goal. FOR TESTING ONLY."""


class InMemoryGoalStore(GoalStore):
    """Dict-backed store; ids come from a monotonically increasing counter."""

    def __init__(self):
        self._goals: Dict[int, Goal] = {}
        self._ids = count(1)

    def save(self, goal: Goal) -> Goal:
        stored = copy.deepcopy(goal)
        if stored.goal_id is None:
            stored.goal_id = next(self._ids)
        elif stored.goal_id not in self._goals:
            raise GoalNotFoundError(stored.goal_id)
        self._goals[stored.goal_id] = stored
        return copy.deepcopy(stored)

    def find_by_id(self, goal_id: int) -> Optional[Goal]:
        goal = self._goals.get(goal_id)
        return copy.deepcopy(goal) if goal is not None else None

    def find_all(self) -> List[Goal]:
        return [copy.deepcopy(g) for g in self._goals.values()]

    def exists_by_id(self, goal_id: int) -> bool:
        return goal_id in self._goals

    def delete_by_id(self, goal_id: int) -> None:
        self._goals.pop(goal_id, None)

    def find_by_user_id(self, user_id: str) -> List[Goal]:
        return [g for g in self.find_all() if g.user_id == user_id]

    def find_by_status(self, status: GoalStatus) -> List[Goal]:
        return [g for g in self.find_all() if g.status == status]

    def find_by_category(self, category: GoalCategory) -> List[Goal]:
        return [g for g in self.find_all() if g.category == category]

    def find_by_user_id_and_status(self, user_id: str, status: GoalStatus) -> List[Goal]:
        return [g for g in self.find_all() if g.user_id == user_id and g.status == status]

    def find_by_start_date_between(self, start: date, end: date) -> List[Goal]:
        return [
            g for g in self.find_all()
            if g.start_date is not None and start <= g.start_date <= end
        ]

    def clear(self) -> None:
        self._goals.clear()
        self._ids = count(1)


class SqlGoalStore(GoalStore):
    """
    SQLAlchemy-backed goal store.

    Maintains identical interface to InMemoryGoalStore. No optimistic locking:
    concurrent writes to the same goal are last-write-wins.
    """

    def save(self, goal: Goal) -> Goal:
        row = self._to_row(goal)
        with get_db_session() as session:
            if goal.goal_id is None:
                result = session.execute(insert(goals).values(**row))
                goal_id = result.inserted_primary_key[0]
            else:
                result = session.execute(
                    update(goals).where(goals.c.goal_id == goal.goal_id).values(**row)
                )
                if result.rowcount == 0:
                    # Deleted since the caller loaded it
                    raise GoalNotFoundError(goal.goal_id)
                goal_id = goal.goal_id
            session.commit()

            stored = session.execute(
                select(goals).where(goals.c.goal_id == goal_id)
            ).first()
            return self._to_goal(stored)

    def find_by_id(self, goal_id: int) -> Optional[Goal]:
        with get_db_session() as session:
            row = session.execute(
                select(goals).where(goals.c.goal_id == goal_id)
            ).first()
            return self._to_goal(row) if row else None

    def find_all(self) -> List[Goal]:
        return self._query()

    def exists_by_id(self, goal_id: int) -> bool:
        with get_db_session() as session:
            row = session.execute(
                select(goals.c.goal_id).where(goals.c.goal_id == goal_id)
            ).first()
            return row is not None

    def delete_by_id(self, goal_id: int) -> None:
        with get_db_session() as session:
            session.execute(delete(goals).where(goals.c.goal_id == goal_id))
            session.commit()

    def find_by_user_id(self, user_id: str) -> List[Goal]:
        return self._query(goals.c.user_id == user_id)

    def find_by_status(self, status: GoalStatus) -> List[Goal]:
        return self._query(goals.c.status == status.value)

    def find_by_category(self, category: GoalCategory) -> List[Goal]:
        return self._query(goals.c.category == category.value)

    def find_by_user_id_and_status(self, user_id: str, status: GoalStatus) -> List[Goal]:
        return self._query(goals.c.user_id == user_id, goals.c.status == status.value)

    def find_by_start_date_between(self, start: date, end: date) -> List[Goal]:
        return self._query(goals.c.start_date >= start, goals.c.start_date <= end)

    def clear(self) -> None:
        with get_db_session() as session:
            session.execute(goals.delete())
            session.commit()

    # Internal helpers -------------------------------------------------
    def _query(self, *filters) -> List[Goal]:
        query = select(goals)
        if filters:
            query = query.where(and_(*filters))
        query = query.order_by(goals.c.goal_id)
        with get_db_session() as session:
            return [self._to_goal(row) for row in session.execute(query)]

    @staticmethod
    def _to_row(goal: Goal) -> dict:
        frequency = goal.frequency or Frequency()
        reward = goal.reward or Reward()
        progress = goal.progress
        return {
            'user_id': goal.user_id,
            'title': goal.title,
            'description': goal.description,
            'category': goal.category.value if goal.category else None,
            'type': goal.type.value if goal.type else None,
            'start_date': goal.start_date,
            'end_date': goal.end_date,
            'frequency_periodicity': frequency.periodicity,
            'frequency_times_per_period': frequency.times_per_period,
            'difficulty': goal.difficulty.value if goal.difficulty else None,
            'reward_points': reward.points,
            'reward_badge': reward.badge,
            'status': goal.status.value if goal.status else None,
            'notifications': goal.notifications,
            'created_at': goal.created_at,
            'progress_completed': progress.completed if progress else None,
            'progress_total': progress.total if progress else None,
            'progress_unit': progress.unit if progress else None,
        }

    @staticmethod
    def _to_goal(row) -> Goal:
        frequency = None
        if row.frequency_periodicity is not None or row.frequency_times_per_period is not None:
            frequency = Frequency(
                periodicity=row.frequency_periodicity,
                times_per_period=row.frequency_times_per_period,
            )

        reward = None
        if row.reward_points is not None or row.reward_badge is not None:
            reward = Reward(points=row.reward_points, badge=row.reward_badge)

        progress = None
        if any(v is not None for v in (row.progress_completed, row.progress_total, row.progress_unit)):
            progress = Progress(
                completed=row.progress_completed,
                total=row.progress_total,
                unit=row.progress_unit,
            )

        created_at = row.created_at
        if created_at is not None and created_at.tzinfo is None:
            # SQLite drops tzinfo; stored values are always UTC
            created_at = created_at.replace(tzinfo=timezone.utc)

        return Goal(
            goal_id=row.goal_id,
            user_id=row.user_id,
            title=row.title,
            description=row.description,
            category=GoalCategory.from_wire(row.category, "category"),
            type=GoalType.coerce(row.type),
            start_date=row.start_date,
            end_date=row.end_date,
            frequency=frequency,
            difficulty=Difficulty.from_wire(row.difficulty, "difficulty"),
            reward=reward,
            status=GoalStatus.from_wire(row.status, "status"),
            notifications=row.notifications,
            created_at=created_at,
            progress=progress,
        )


# ============================================================================
# Store selection
# ============================================================================

def get_goal_store() -> GoalStore:
    """
    Build the goal store implementation for the current configuration.

    - GOAL_STORE=memory forces the in-memory store
    - GOAL_STORE=sql forces the SQL store (tables are created if missing)
    - GOAL_STORE=auto uses SQL when a database URL is set and reachable,
      otherwise falls back to in-memory
    """
    from checkhealth.core.database import check_connection, create_all_tables, get_database_url

    mode = (os.getenv("GOAL_STORE") or settings.GOAL_STORE or "auto").lower()

    if mode == "memory":
        return InMemoryGoalStore()

    if mode == "sql":
        create_all_tables()
        return SqlGoalStore()

    if get_database_url():
        if check_connection():
            create_all_tables()
            return SqlGoalStore()
        logger.warning("[goal_store] database unavailable, falling back to in-memory")

    return InMemoryGoalStore()


_store: Optional[GoalStore] = None


def get_store() -> GoalStore:
    """Process-wide store singleton."""
    global _store
    if _store is None:
        _store = get_goal_store()
    return _store


def reset_store() -> None:
    """Forget the singleton so the next get_store() re-selects. FOR TESTING ONLY."""
    global _store
    _store = None
