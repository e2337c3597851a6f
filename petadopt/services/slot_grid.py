"""Fixed daily slot grid and the rolling booking horizon.

Pure functions of the configured business rules and a reference ``now``;
nothing here touches the database.
"""
from collections.abc import Iterator
from datetime import date, datetime, timedelta

from petadopt.core.config import settings


class HorizonDates:
    """The bookable dates after ``today``: tomorrow through today + ``days``.

    Iterating computes the dates lazily and can be repeated.
    """

    def __init__(self, today: date, days: int):
        self.start = today + timedelta(days=1)
        self.days = days

    def __iter__(self) -> Iterator[date]:
        for offset in range(self.days):
            yield self.start + timedelta(days=offset)

    def __len__(self) -> int:
        return self.days

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and not isinstance(day, datetime) and self.first <= day <= self.last

    @property
    def first(self) -> date:
        return self.start

    @property
    def last(self) -> date:
        return self.start + timedelta(days=self.days - 1)


def _as_date(now: date | datetime) -> date:
    # datetime is a subclass of date, check it first
    if isinstance(now, datetime):
        return now.date()
    return now


def horizon_dates(now: date | datetime) -> HorizonDates:
    return HorizonDates(_as_date(now), settings.booking_horizon_days)


def slot_labels() -> tuple[str, ...]:
    """Slot start labels for any day, e.g. ("09:00", ..., "16:00") with hourly slots."""
    first = settings.first_slot_hour * 60
    step = settings.slot_duration_minutes
    starts = (first + i * step for i in range(settings.slots_per_day))
    return tuple(f"{m // 60:02d}:{m % 60:02d}" for m in starts)


def total_daily_capacity() -> int:
    return settings.slots_per_day


def is_slot_label(value: str) -> bool:
    return value in slot_labels()


def parse_calendar_date(value: str) -> date:
    """Parse an ISO YYYY-MM-DD string; raises ValueError otherwise."""
    if len(value) != 10:
        raise ValueError(f"not a calendar date: {value!r}")
    return date.fromisoformat(value)
