"""Tests for day-level recurrence matching."""

from types import SimpleNamespace

import pytest

from messageflow.services.scheduler.recurrence import matches


def _schedule(schedule_type, day_of_week=None, day_of_month=None):
    return SimpleNamespace(schedule_type=schedule_type, day_of_week=day_of_week, day_of_month=day_of_month)


@pytest.mark.parametrize("dow", range(7))
@pytest.mark.parametrize("dom", [1, 15, 28, 31])
def test_daily_always_matches(dow, dom):
    assert matches(_schedule("daily", day_of_week=2, day_of_month=9), dow, dom)


def test_weekly_matches_only_its_weekday():
    wednesday = _schedule("weekly", day_of_week=3)
    assert [dow for dow in range(7) if matches(wednesday, dow, 10)] == [3]


def test_weekly_without_day_matches_every_day():
    schedule = _schedule("weekly")
    assert all(matches(schedule, dow, 10) for dow in range(7))


def test_weekly_ignores_day_of_month():
    assert not matches(_schedule("weekly", day_of_week=1, day_of_month=5), 2, 5)


def test_monthly_matches_only_its_day():
    first = _schedule("monthly", day_of_month=1)
    assert matches(first, 5, 1)
    assert not matches(first, 5, 2)


def test_monthly_31st_never_fires_in_a_30_day_month():
    schedule = _schedule("monthly", day_of_month=31)
    assert not any(matches(schedule, (d + 1) % 7, d) for d in range(1, 31))


def test_monthly_without_day_matches_every_day():
    schedule = _schedule("monthly")
    assert all(matches(schedule, 0, dom) for dom in range(1, 32))


@pytest.mark.parametrize("schedule_type", ["hourly", "", "DAILY", None])
def test_unknown_types_never_fire(schedule_type):
    assert not matches(_schedule(schedule_type), 0, 1)
