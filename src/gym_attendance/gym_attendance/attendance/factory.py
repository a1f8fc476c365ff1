from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from .strategies.base import CutoffStrategy
from .strategies.earliest_strategy import EarliestCutoff
from .strategies.end_of_day_strategy import EndOfDayCutoff
from .strategies.max_duration_strategy import MaxDurationCutoff


@dataclass
class CutoffStrategyFactory:
    """Factory Pattern: build the auto-checkout cutoff from settings."""

    tz: ZoneInfo

    def build(self, *, end_of_day: bool = True, max_session_hours: Optional[float] = None) -> CutoffStrategy:
        strategies: list[CutoffStrategy] = []
        if max_session_hours:
            strategies.append(MaxDurationCutoff(timedelta(hours=float(max_session_hours))))
        if end_of_day or not strategies:
            strategies.append(EndOfDayCutoff(self.tz))

        if len(strategies) == 1:
            return strategies[0]
        return EarliestCutoff(strategies)
