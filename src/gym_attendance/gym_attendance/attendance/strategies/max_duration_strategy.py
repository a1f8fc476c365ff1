from __future__ import annotations

from datetime import datetime, timedelta

from .base import CutoffStrategy


class MaxDurationCutoff(CutoffStrategy):
    """Close once a session has lasted longer than max_session."""

    def __init__(self, max_session: timedelta):
        if max_session <= timedelta(0):
            raise ValueError("max_session must be positive")
        self._max_session = max_session

    def cutoff_for(self, check_in_time: datetime) -> datetime:
        return check_in_time + self._max_session

    def selection_bound(self, now: datetime) -> datetime:
        return now - self._max_session
