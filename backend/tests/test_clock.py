"""Tests for calendar resolution in IANA time zones."""

import logging
from datetime import datetime, timedelta, timezone

from messageflow.services.scheduler.clock import CalendarClock, CalendarInstant


def test_resolves_fields_in_zone():
    # 2024-01-31 16:30 UTC is Thursday 2024-02-01 00:30 in Shanghai
    at = datetime(2024, 1, 31, 16, 30, tzinfo=timezone.utc)
    assert CalendarClock().now("Asia/Shanghai", at=at) == CalendarInstant(
        hour=0, minute=30, day_of_week=4, day_of_month=1
    )


def test_sunday_is_zero_and_saturday_is_six():
    clock = CalendarClock()
    sunday = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
    saturday = sunday - timedelta(days=1)
    assert clock.now("UTC", at=sunday).day_of_week == 0
    assert clock.now("UTC", at=saturday).day_of_week == 6


def test_spring_forward_skips_the_missing_hour():
    clock = CalendarClock()
    before = clock.now("America/New_York", at=datetime(2024, 3, 10, 6, 59, tzinfo=timezone.utc))
    after = clock.now("America/New_York", at=datetime(2024, 3, 10, 7, 0, tzinfo=timezone.utc))
    assert (before.hour, before.minute) == (1, 59)
    assert (after.hour, after.minute) == (3, 0)


def test_fall_back_repeats_wall_clock_on_distinct_instants():
    clock = CalendarClock()
    first = clock.now("America/New_York", at=datetime(2024, 11, 3, 5, 30, tzinfo=timezone.utc))
    second = clock.now("America/New_York", at=datetime(2024, 11, 3, 6, 30, tzinfo=timezone.utc))
    assert (first.hour, first.minute) == (1, 30)
    assert (second.hour, second.minute) == (1, 30)


def test_consecutive_minutes_differ():
    clock = CalendarClock()
    start = datetime(2024, 6, 1, 23, 59, tzinfo=timezone.utc)
    a = clock.now("Europe/Berlin", at=start)
    b = clock.now("Europe/Berlin", at=start + timedelta(minutes=1))
    assert (a.hour, a.minute) != (b.hour, b.minute)


def test_unknown_zone_falls_back_to_default(caplog):
    clock = CalendarClock(default_timezone="Asia/Shanghai")
    at = datetime(2024, 5, 1, 1, 15, tzinfo=timezone.utc)
    with caplog.at_level(logging.WARNING):
        result = clock.now("Mars/Olympus_Mons", at=at)
    assert result == clock.now("Asia/Shanghai", at=at)
    assert result.hour == 9
    assert "Mars/Olympus_Mons" in caplog.text


def test_invalid_default_falls_back_to_utc():
    clock = CalendarClock(default_timezone="Not/A_Zone")
    at = datetime(2024, 5, 1, 1, 15, tzinfo=timezone.utc)
    assert clock.now("also-bogus", at=at) == CalendarInstant(hour=1, minute=15, day_of_week=3, day_of_month=1)


def test_no_zone_uses_default():
    clock = CalendarClock(default_timezone="Asia/Tokyo")
    at = datetime(2024, 5, 1, 1, 15, tzinfo=timezone.utc)
    assert clock.now(at=at).hour == 10


def test_defaults_to_current_time():
    result = CalendarClock().now("UTC")
    now = datetime.now(timezone.utc)
    assert 0 <= result.hour <= 23
    assert result.day_of_month in {now.day, (now - timedelta(minutes=1)).day}
