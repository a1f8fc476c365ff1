from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class CutoffStrategy(ABC):
    """Strategy Pattern: decide when an open session is force-closed."""

    @abstractmethod
    def cutoff_for(self, check_in_time: datetime) -> datetime:
        """Moment at which a session opened at check_in_time is auto-closed (naive UTC)."""
        raise NotImplementedError

    @abstractmethod
    def selection_bound(self, now: datetime) -> datetime:
        """Every open session checked in before this bound is past its cutoff at `now`."""
        raise NotImplementedError

    def is_due(self, check_in_time: datetime, now: datetime) -> bool:
        return self.cutoff_for(check_in_time) <= now
