from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import DayWindow, day_window, iter_days, local_day_of, now_utc, today_window
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_POLL_SECONDS
from ..core.enums import StatsPeriod
from ..core.exceptions import ValidationError
from .model import AttendanceListRow, AttendanceRecord, DailyCount
from .repository import AttendanceRepository


class AttendanceQueryService:
    """Read side for dashboards. No side effects.

    "Today" is always an explicit DayWindow so callers choose the facility-local day.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        tz: ZoneInfo,
        poll_seconds: int = DEFAULT_POLL_SECONDS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._tz = tz
        self._poll_seconds = int(poll_seconds)
        self._clock = clock

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def today(self) -> DayWindow:
        return today_window(self._tz, now=self._clock())

    def currently_inside(self, facility_id: int, window: DayWindow) -> int:
        return self._attendance.count_open(facility_id=facility_id, start=window.start, end=window.end)

    def todays_checkins(self, facility_id: int, window: DayWindow) -> int:
        return self._attendance.count_checkins(facility_id=facility_id, start=window.start, end=window.end)

    def history(self, facility_id: int, first_day: date, last_day: date) -> list[DailyCount]:
        if first_day > last_day:
            raise ValidationError("dateFrom must not be after dateTo")

        start = day_window(first_day, self._tz).start
        end = day_window(last_day, self._tz).end
        times = self._attendance.list_checkin_times(facility_id=facility_id, start=start, end=end)

        per_day = Counter(local_day_of(t, self._tz) for t in times)
        return [DailyCount(date=d, checkins=per_day.get(d, 0)) for d in iter_days(first_day, last_day)]

    def stats(self, facility_id: int, period: StatsPeriod, *, now: datetime | None = None) -> dict:
        now = now or self._clock()
        window = today_window(self._tz, now=now)
        if period == StatsPeriod.TODAY:
            start = window.start
        elif period == StatsPeriod.WEEK:
            start = now - timedelta(days=7)
        else:
            start = now - timedelta(days=30)
        end = window.end

        return {
            "totalCheckIns": self._attendance.count_checkins(facility_id=facility_id, start=start, end=end),
            "uniqueMembers": self._attendance.count_unique_subjects(facility_id=facility_id, start=start, end=end),
            "currentlyInGym": self._attendance.count_open(facility_id=facility_id, start=start, end=end),
        }

    def today_list(self, facility_id: int, window: DayWindow) -> Sequence[AttendanceListRow]:
        return self._attendance.list_with_subjects(facility_id=facility_id, start=window.start, end=window.end)

    def list_records(
        self,
        facility_id: int,
        *,
        subject_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        if date_from and date_to and date_from > date_to:
            raise ValidationError("dateFrom must not be after dateTo")

        return self._attendance.list_for_facility(
            facility_id=facility_id,
            subject_id=subject_id,
            start=day_window(date_from, self._tz).start if date_from else None,
            end=day_window(date_to, self._tz).end if date_to else None,
        )

    def subject_history(self, subject_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_subject(subject_id, limit)

    def dashboard(self, facility_id: int, window: DayWindow, *, days: int) -> dict:
        """Payload for the polled dashboard endpoint."""

        first_day = window.day - timedelta(days=max(1, days) - 1)
        return {
            "date": window.day.strftime("%Y-%m-%d"),
            "todayCheckIns": self.todays_checkins(facility_id, window),
            "currentlyInside": self.currently_inside(facility_id, window),
            "records": [row.to_dict() for row in self.today_list(facility_id, window)],
            "history": [d.to_dict() for d in self.history(facility_id, first_day, window.day)],
            "pollSeconds": self._poll_seconds,
        }
