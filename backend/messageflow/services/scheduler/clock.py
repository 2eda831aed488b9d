"""Resolve wall-clock time into the calendar fields schedules are matched against."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarInstant:
    hour: int
    minute: int
    day_of_week: int  # 0=Sun..6=Sat
    day_of_month: int


def _load_zone(name: str) -> ZoneInfo | None:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


class CalendarClock:
    """Civil-time lookups in IANA zones, falling back to a default zone."""

    def __init__(self, default_timezone: str = "UTC"):
        self.default_timezone = default_timezone

    def zone(self, name: str | None = None) -> ZoneInfo:
        if name:
            tz = _load_zone(name)
            if tz is not None:
                return tz
            logger.warning(f"Unknown timezone {name!r}, falling back to {self.default_timezone}")

        tz = _load_zone(self.default_timezone)
        if tz is None:
            logger.warning(f"Default timezone {self.default_timezone!r} is invalid, using UTC")
            tz = ZoneInfo("UTC")
        return tz

    def now(self, tz_name: str | None = None, at: datetime | None = None) -> CalendarInstant:
        """Return hour/minute/weekday/day-of-month for ``at`` (default: now) in ``tz_name``."""
        moment = at if at is not None else datetime.now(timezone.utc)
        local = moment.astimezone(self.zone(tz_name))
        return CalendarInstant(
            hour=local.hour,
            minute=local.minute,
            day_of_week=local.isoweekday() % 7,  # 0=Sun
            day_of_month=local.day,
        )
