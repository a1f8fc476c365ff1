from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ..common.datetime_utils import now_utc
from ..core.enums import ExitType
from .repository import AttendanceRepository
from .strategies.base import CutoffStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    examined: int = 0
    closed: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {"examined": self.examined, "closed": self.closed, "skipped": self.skipped, "failed": self.failed}


class AutoCheckoutReconciler:
    """Periodic sweep that force-closes sessions left open past their cutoff.

    Each record is closed with its own guarded update (still 'in'), so a crash
    mid-sweep leaves the remaining records for the next run and a concurrent
    manual check-out simply makes the update a no-op.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        cutoff: CutoffStrategy,
        batch_size: int = 500,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._cutoff = cutoff
        self._batch_size = int(batch_size)
        self._clock = clock

    def sweep(self, *, now: datetime | None = None) -> SweepResult:
        now = now or self._clock()
        bound = self._cutoff.selection_bound(now)
        candidates = self._attendance.list_open_checked_in_before(before=bound, limit=self._batch_size)

        closed = skipped = failed = 0
        for record in candidates:
            try:
                cutoff_at = self._cutoff.cutoff_for(record.check_in_time)
                if cutoff_at > now:
                    skipped += 1
                    continue
                if self._attendance.close_session(
                    attendance_id=record.attendance_id,
                    check_out_time=max(cutoff_at, record.check_in_time),
                    exit_type=ExitType.AUTO,
                ):
                    closed += 1
                else:
                    skipped += 1
            except Exception:
                failed += 1
                logger.exception("auto-checkout failed for attendance_id=%s", record.attendance_id)

        result = SweepResult(examined=len(candidates), closed=closed, skipped=skipped, failed=failed)
        if candidates:
            logger.info("auto-checkout sweep: %s", result.to_dict())
        return result
