from __future__ import annotations

from datetime import datetime
from typing import Sequence

from .base import CutoffStrategy


class EarliestCutoff(CutoffStrategy):
    """Composite: a session closes at whichever configured cutoff comes first."""

    def __init__(self, strategies: Sequence[CutoffStrategy]):
        if not strategies:
            raise ValueError("at least one cutoff strategy is required")
        self._strategies = tuple(strategies)

    def cutoff_for(self, check_in_time: datetime) -> datetime:
        return min(s.cutoff_for(check_in_time) for s in self._strategies)

    def selection_bound(self, now: datetime) -> datetime:
        # A session is due if any strategy says so.
        return max(s.selection_bound(now) for s in self._strategies)
