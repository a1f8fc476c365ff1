from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from ...common.datetime_utils import day_window, local_day_of
from .base import CutoffStrategy


class EndOfDayCutoff(CutoffStrategy):
    """Close at the end of the facility-local calendar day of the check-in."""

    def __init__(self, tz: ZoneInfo):
        self._tz = tz

    def cutoff_for(self, check_in_time: datetime) -> datetime:
        return day_window(local_day_of(check_in_time, self._tz), self._tz).end

    def selection_bound(self, now: datetime) -> datetime:
        return day_window(local_day_of(now, self._tz), self._tz).start
