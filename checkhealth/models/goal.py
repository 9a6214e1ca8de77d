"""
checkhealth/models/goal.py
Goal aggregate: a gamified health/wellness target tracked per user.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, Optional

from checkhealth.core.errors import InvalidEnumValueError


class WireEnum(str, Enum):
    """Enum whose members map one-to-one onto declared wire strings."""

    @classmethod
    def _wire_table(cls) -> Dict[str, "WireEnum"]:
        return {member.value: member for member in cls}

    @classmethod
    def from_wire(cls, value: Optional[str], field: Optional[str] = None):
        """Parse a wire string; None passes through, unknown strings raise."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        member = cls._wire_table().get(value)
        if member is None:
            raise InvalidEnumValueError(field or cls.__name__, value, cls._wire_table().keys())
        return member

    def to_wire(self) -> str:
        return self.value


class GoalCategory(WireEnum):
    PHYSICAL_HEALTH = "PHYSICAL_HEALTH"
    MENTAL_HEALTH = "MENTAL_HEALTH"
    NUTRITION = "NUTRITION"
    SLEEP = "SLEEP"
    WELLBEING = "WELLBEING"


class GoalType(WireEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    SINGLE = "single"

    @classmethod
    def coerce(cls, value) -> Optional["GoalType"]:
        """Lenient parse: unknown or missing values map to None."""
        if isinstance(value, cls):
            return value
        return cls._wire_table().get(value) if isinstance(value, str) else None


class Difficulty(WireEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GoalStatus(WireEnum):
    """Lifecycle: active -> completed (automatic), archived/cancelled (manual)."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"
    CANCELLED = "cancelled"


@dataclass
class Frequency:
    periodicity: Optional[str] = None
    times_per_period: Optional[int] = None


@dataclass
class Reward:
    points: Optional[int] = None  # negative values act as a penalty
    badge: Optional[str] = None


@dataclass
class Progress:
    completed: Optional[int] = 0
    total: Optional[int] = None
    unit: Optional[str] = None


@dataclass
class Goal:
    """Domain model for a goal. goal_id is assigned by the store."""

    user_id: str
    title: str
    goal_id: Optional[int] = None
    description: Optional[str] = None
    category: Optional[GoalCategory] = None
    type: Optional[GoalType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    frequency: Optional[Frequency] = None
    difficulty: Optional[Difficulty] = None
    reward: Optional[Reward] = None
    status: Optional[GoalStatus] = None
    notifications: Optional[bool] = None
    created_at: Optional[datetime] = None
    progress: Optional[Progress] = None
