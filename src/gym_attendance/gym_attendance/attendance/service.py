from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import DayWindow, now_utc
from ..common.retry import NO_RETRY, RetryPolicy
from ..core.enums import AttendanceAction, AttendanceStatus, CheckInSource, ExitType
from ..core.exceptions import (
    AlreadyCheckedIn,
    AuthorizationError,
    DuplicateOpenSession,
    NotCheckedIn,
    NotFoundError,
    ValidationError,
)
from ..subjects.model import Subject
from ..subjects.repository import SubjectRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .strategies.base import CutoffStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodayStatus:
    state: str
    message: str
    record: Optional[AttendanceRecord]

    def to_dict(self) -> dict:
        return {
            "status": self.state,
            "message": self.message,
            "record": self.record.to_dict() if self.record else None,
        }


class AttendanceService:
    """Check-in / check-out use cases.

    Invariant: at most one open record per (subject, facility). The repository's
    unique index is the final guard; the lookup here only gives a friendly error
    in the common case.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        subjects: SubjectRepository,
        *,
        cutoff: CutoffStrategy,
        retry: RetryPolicy | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._subjects = subjects
        self._cutoff = cutoff
        self._retry = retry or NO_RETRY
        self._clock = clock

    def require_subject(self, subject_id: int, facility_id: int, *, require_active: bool = False) -> Subject:
        subject = self._subjects.get_by_id(subject_id)
        if not subject:
            raise NotFoundError("Member not found")
        if subject.facility_id != facility_id:
            raise AuthorizationError("Member not found or does not belong to your gym.")
        if require_active and not subject.is_active:
            raise ValidationError("Membership is not active")
        return subject

    def open_session(self, subject_id: int, facility_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        """Return the subject's open record, closing it first if it is past its cutoff."""

        now = now or self._clock()
        record = self._retry.run(self._attendance.get_open, subject_id=subject_id, facility_id=facility_id)
        if not record:
            return None

        cutoff_at = self._cutoff.cutoff_for(record.check_in_time)
        if cutoff_at <= now:
            closed = self._retry.run(
                self._attendance.close_session,
                attendance_id=record.attendance_id,
                check_out_time=cutoff_at,
                exit_type=ExitType.AUTO,
            )
            if closed:
                logger.info(
                    "auto-checkout on access: attendance_id=%s subject=%s facility=%s cutoff=%s",
                    record.attendance_id, subject_id, facility_id, cutoff_at,
                )
            return None
        return record

    def check_in(
        self,
        subject_id: int,
        facility_id: int,
        *,
        source: CheckInSource = CheckInSource.MANUAL,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        # DATETIME columns hold whole seconds.
        now = (now or self._clock()).replace(microsecond=0)
        self.require_subject(subject_id, facility_id, require_active=True)

        if self.open_session(subject_id, facility_id, now=now):
            logger.warning("duplicate check-in rejected: subject=%s facility=%s", subject_id, facility_id)
            raise AlreadyCheckedIn()

        attempts = 0

        def insert():
            nonlocal attempts
            attempts += 1
            return self._attendance.create_checkin(
                facility_id=facility_id, subject_id=subject_id, check_in_time=now, source=source
            )

        try:
            attendance_id = self._retry.run(insert)
        except DuplicateOpenSession:
            if attempts > 1:
                # An earlier attempt may have committed before its connection dropped.
                existing = self._retry.run(self._attendance.get_open, subject_id=subject_id, facility_id=facility_id)
                if existing and existing.check_in_time == now and existing.source == source:
                    logger.warning("check-in committed by an earlier attempt: attendance_id=%s", existing.attendance_id)
                    return existing
            # Lost a race with a concurrent check-in for the same subject.
            logger.warning("duplicate check-in rejected by storage: subject=%s facility=%s", subject_id, facility_id)
            raise AlreadyCheckedIn() from None

        logger.info("check-in: attendance_id=%s subject=%s facility=%s source=%s", attendance_id, subject_id, facility_id, source.value)
        return AttendanceRecord(
            attendance_id=attendance_id,
            facility_id=facility_id,
            subject_id=subject_id,
            check_in_time=now,
            check_out_time=None,
            status=AttendanceStatus.IN,
            exit_type=None,
            source=source,
            created_at=now,
        )

    def check_out(self, subject_id: int, facility_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = (now or self._clock()).replace(microsecond=0)
        self.require_subject(subject_id, facility_id)

        record = self.open_session(subject_id, facility_id, now=now)
        if not record:
            raise NotCheckedIn()

        check_out_time = max(now, record.check_in_time)
        attempts = 0

        def close():
            nonlocal attempts
            attempts += 1
            return self._attendance.close_session(
                attendance_id=record.attendance_id, check_out_time=check_out_time, exit_type=ExitType.MANUAL
            )

        closed = self._retry.run(close)
        if not closed and attempts > 1:
            stored = self._retry.run(self._attendance.get_by_id, record.attendance_id)
            if (
                stored
                and stored.status == AttendanceStatus.OUT
                and stored.exit_type == ExitType.MANUAL
                and stored.check_out_time == check_out_time
            ):
                logger.warning("check-out committed by an earlier attempt: attendance_id=%s", record.attendance_id)
                return stored
        if not closed:
            # The reconciler (or another request) closed it first.
            raise NotCheckedIn()

        logger.info("check-out: attendance_id=%s subject=%s facility=%s", record.attendance_id, subject_id, facility_id)
        return replace(record, check_out_time=check_out_time, status=AttendanceStatus.OUT, exit_type=ExitType.MANUAL)

    def mark(
        self,
        subject_id: int,
        facility_id: int,
        action: AttendanceAction,
        *,
        source: CheckInSource = CheckInSource.MANUAL,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        if action == AttendanceAction.CHECK_IN:
            return self.check_in(subject_id, facility_id, source=source, now=now)
        return self.check_out(subject_id, facility_id, now=now)

    def today_status(
        self, subject_id: int, facility_id: int, *, window: DayWindow, now: datetime | None = None
    ) -> TodayStatus:
        now = now or self._clock()
        open_record = self.open_session(subject_id, facility_id, now=now)
        if open_record:
            return TodayStatus("in_gym", "You're currently in the gym", open_record)

        last = self._attendance.latest_for_subject(
            subject_id=subject_id, facility_id=facility_id, start=window.start, end=window.end
        )
        if not last:
            return TodayStatus("not_checked_in", "You have not checked in today", None)
        if last.exit_type == ExitType.AUTO:
            return TodayStatus("checked_out", "Your session was closed automatically", last)
        return TodayStatus("checked_out", "You've checked out for the day", last)
