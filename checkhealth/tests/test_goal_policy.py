from datetime import date, timedelta

import pytest

from checkhealth.features.goals.policy import default_progress
from checkhealth.models.goal import GoalType


@pytest.mark.parametrize(
    "goal_type, expected",
    [
        (GoalType.DAILY, (30, "days")),
        (GoalType.WEEKLY, (4, "weeks")),
        (GoalType.MONTHLY, (1, "months")),
        (GoalType.SINGLE, (1, "goal")),
        (None, (30, "days")),
        ("fortnightly", (30, "days")),
        ("weekly", (4, "weeks")),
    ],
)
def test_default_table_without_dates(goal_type, expected):
    assert default_progress(goal_type) == expected


def test_daily_span_counts_both_ends():
    start = date(2025, 1, 1)
    assert default_progress(GoalType.DAILY, start, start + timedelta(days=9)) == (10, "days")


def test_weekly_span():
    start = date(2025, 1, 1)
    assert default_progress(GoalType.WEEKLY, start, start + timedelta(days=21)) == (4, "weeks")


def test_monthly_span():
    start = date(2025, 1, 1)
    assert default_progress(GoalType.MONTHLY, start, start + timedelta(days=90)) == (4, "months")


@pytest.mark.parametrize("span", [0, 1, 45, 365])
def test_single_is_always_one(span):
    start = date(2025, 1, 1)
    assert default_progress(GoalType.SINGLE, start, start + timedelta(days=span)) == (1, "goal")


def test_unknown_type_with_dates_uses_daily_rule():
    start = date(2025, 3, 1)
    assert default_progress("yearly", start, start + timedelta(days=4)) == (5, "days")


def test_same_day_range_is_one():
    day = date(2025, 6, 1)
    assert default_progress(GoalType.DAILY, day, day) == (1, "days")
    assert default_progress(GoalType.WEEKLY, day, day) == (1, "weeks")


def test_inverted_range_is_clamped_to_one():
    start = date(2025, 6, 30)
    end = date(2025, 6, 1)
    assert default_progress(GoalType.DAILY, start, end) == (1, "days")
    assert default_progress(GoalType.MONTHLY, start, end) == (1, "months")


def test_single_date_falls_back_to_table():
    start = date(2025, 1, 1)
    assert default_progress(GoalType.WEEKLY, start, None) == (4, "weeks")
    assert default_progress(GoalType.DAILY, None, start) == (30, "days")
