"""
checkhealth/features/goals/mapper.py

Translation between wire shapes and the Goal domain model.

Inbound: request objects (anything exposing the GoalRequest attributes) are
turned into Goal skeletons, with wire strings parsed strictly into enums.
Outbound: Goal -> JSON-ready dict with string ids, UTC-offset timestamps,
a gamification summary and a human readable progress message.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

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

PROGRESS_MESSAGE = (
    "Progress updated! You completed {completed} of {total} {unit} "
    "and earned {points} points."
)

# Values substituted into PROGRESS_MESSAGE when the goal leaves them unset
MESSAGE_DEFAULTS: Dict[str, Any] = {
    "completed": 0,
    "total": 0,
    "unit": "days",
    "points": 0,
}

# Level is not derived from points yet; every user reports level 1
DEFAULT_USER_LEVEL = 1


def to_entity(request) -> Optional[Goal]:
    """Build a Goal skeleton from a create/update request."""
    if request is None:
        return None

    return Goal(
        user_id=request.user_id,
        title=request.title,
        description=request.description,
        category=GoalCategory.from_wire(request.category, "category"),
        type=GoalType.from_wire(request.type, "type"),
        start_date=request.start_date,
        end_date=request.end_date,
        frequency=_to_frequency(request.frequency),
        difficulty=Difficulty.from_wire(request.difficulty, "difficulty"),
        reward=_to_reward(request.reward),
        status=GoalStatus.from_wire(request.status, "status"),
        notifications=request.notifications,
        progress=_to_progress(getattr(request, "progress", None)),
    )


def to_response(goal: Optional[Goal]) -> Optional[Dict[str, Any]]:
    """Render a Goal as the JSON response body."""
    if goal is None:
        return None

    response: Dict[str, Any] = {
        "goal_id": str(goal.goal_id) if goal.goal_id is not None else None,
        "user_id": goal.user_id,
        "title": goal.title,
        "description": goal.description,
        "category": _wire(goal.category),
        "type": _wire(goal.type),
        "start_date": goal.start_date.isoformat() if goal.start_date else None,
        "end_date": goal.end_date.isoformat() if goal.end_date else None,
        "frequency": _frequency_body(goal.frequency),
        "difficulty": _wire(goal.difficulty),
        "reward": _reward_body(goal.reward),
        "status": _wire(goal.status),
        "notifications": goal.notifications,
        "created_at": to_offset_timestamp(goal.created_at),
        "progress": _progress_body(goal.progress),
        "gamification": gamification_summary(goal),
        "message": None,
    }

    if goal.progress is not None:
        response["message"] = progress_message(goal)

    return response


def progress_message(goal: Goal) -> str:
    progress = goal.progress or Progress(completed=None)
    supplied = {
        "completed": progress.completed,
        "total": progress.total,
        "unit": progress.unit,
        "points": goal.reward.points if goal.reward else None,
    }
    values = {**MESSAGE_DEFAULTS, **{k: v for k, v in supplied.items() if v is not None}}
    return PROGRESS_MESSAGE.format(**values)


def gamification_summary(goal: Goal) -> Dict[str, Any]:
    reward = goal.reward or Reward()
    return {
        "points_awarded": reward.points,
        "badge": reward.badge,
        "user_level": DEFAULT_USER_LEVEL,
    }


def to_offset_timestamp(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with explicit offset; naive datetimes are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


# Internal helpers -------------------------------------------------
def _wire(member) -> Optional[str]:
    return member.to_wire() if member is not None else None


def _to_frequency(dto) -> Optional[Frequency]:
    if dto is None:
        return None
    return Frequency(periodicity=dto.periodicity, times_per_period=dto.times_per_period)


def _to_reward(dto) -> Optional[Reward]:
    if dto is None:
        return None
    return Reward(points=dto.points, badge=dto.badge)


def _to_progress(dto) -> Optional[Progress]:
    if dto is None:
        return None
    return Progress(completed=dto.completed, total=dto.total, unit=dto.unit)


def _frequency_body(frequency: Optional[Frequency]) -> Optional[Dict[str, Any]]:
    if frequency is None:
        return None
    return {"periodicity": frequency.periodicity, "times_per_period": frequency.times_per_period}


def _reward_body(reward: Optional[Reward]) -> Optional[Dict[str, Any]]:
    if reward is None:
        return None
    return {"points": reward.points, "badge": reward.badge}


def _progress_body(progress: Optional[Progress]) -> Optional[Dict[str, Any]]:
    if progress is None:
        return None
    return {"completed": progress.completed, "total": progress.total, "unit": progress.unit}
