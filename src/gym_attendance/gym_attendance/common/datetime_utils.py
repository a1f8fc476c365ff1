from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class DayWindow:
    """Half-open [start, end) range of naive UTC datetimes covering one facility-local day."""

    day: date
    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return self.start <= value < self.end


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current UTC time as a naive datetime (the storage convention).

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_local(value: datetime, tz: ZoneInfo) -> datetime:
    return value.replace(tzinfo=timezone.utc).astimezone(tz)


def local_day_of(value: datetime, tz: ZoneInfo) -> date:
    """Facility-local calendar day of a naive UTC datetime."""
    return to_local(value, tz).date()


def day_window(day: date, tz: ZoneInfo) -> DayWindow:
    start_local = datetime.combine(day, time.min, tzinfo=tz)
    end_local = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return DayWindow(
        day=day,
        start=start_local.astimezone(timezone.utc).replace(tzinfo=None),
        end=end_local.astimezone(timezone.utc).replace(tzinfo=None),
    )


def today_window(tz: ZoneInfo, *, now: datetime | None = None) -> DayWindow:
    now = now or now_utc()
    return day_window(local_day_of(now, tz), tz)


def iter_days(first: date, last: date) -> Iterator[date]:
    d = first
    while d <= last:
        yield d
        d += timedelta(days=1)


def isoformat_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.replace(microsecond=0).isoformat() + "Z"
