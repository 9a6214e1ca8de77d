from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Tuple, Union

from checkhealth.models.goal import GoalType


# type -> (unit, total when no date range is known)
DEFAULT_PROGRESS_TABLE: Dict[Optional[GoalType], Tuple[str, int]] = {
    GoalType.DAILY: ("days", 30),
    GoalType.WEEKLY: ("weeks", 4),
    GoalType.MONTHLY: ("months", 1),
    GoalType.SINGLE: ("goal", 1),
    None: ("days", 30),
}

# days per counted period when a date range is known
_PERIOD_DAYS: Dict[Optional[GoalType], int] = {
    GoalType.DAILY: 1,
    GoalType.WEEKLY: 7,
    GoalType.MONTHLY: 30,
    None: 1,
}


def default_progress(
    goal_type: Union[GoalType, str, None],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[int, str]:
    """
    Derive the (total, unit) pair used to seed a goal's progress.

    Unknown or missing types fall into the daily bucket. When both dates are
    present the total counts the periods in the inclusive range; otherwise the
    fixed table value is used. Inverted ranges are clamped to a total of 1.
    """
    kind = GoalType.coerce(goal_type)
    unit, total = DEFAULT_PROGRESS_TABLE[kind]

    if start_date is not None and end_date is not None:
        total = span_total(kind, start_date, end_date)

    return total, unit


def span_total(goal_type: Optional[GoalType], start_date: date, end_date: date) -> int:
    if goal_type is GoalType.SINGLE:
        return 1
    span_days = (end_date - start_date).days
    periods = span_days // _PERIOD_DAYS[goal_type] + 1
    return max(periods, 1)
