"""Day-level recurrence rules for schedules whose hour and minute already match."""

from typing import Optional, Protocol

from messageflow.models.schedule import ScheduleType


class Recurrence(Protocol):
    schedule_type: str
    day_of_week: Optional[int]
    day_of_month: Optional[int]


def matches(schedule: Recurrence, day_of_week: int, day_of_month: int) -> bool:
    """Whether ``schedule`` fires on the given weekday (0=Sun) and day of month.

    A weekly or monthly schedule with no day set fires every day. Unknown
    schedule types never fire.
    """
    schedule_type = schedule.schedule_type

    if schedule_type == ScheduleType.DAILY.value:
        return True

    if schedule_type == ScheduleType.WEEKLY.value:
        if schedule.day_of_week is None:
            return True
        return schedule.day_of_week == day_of_week

    if schedule_type == ScheduleType.MONTHLY.value:
        if schedule.day_of_month is None:
            return True
        return schedule.day_of_month == day_of_month

    return False
