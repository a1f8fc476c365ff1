from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import CheckInSource, ExitType
from .model import AttendanceListRow, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_open(self, *, subject_id: int, facility_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        facility_id: int,
        subject_id: int,
        check_in_time: datetime,
        source: CheckInSource,
    ) -> int:
        """Insert an open record.

        Raises DuplicateOpenSession when the subject already has one open at the facility.
        """

        raise NotImplementedError

    def close_session(self, *, attendance_id: int, check_out_time: datetime, exit_type: ExitType) -> bool:
        """Close a record only if it is still open. Returns False when nothing changed."""

        raise NotImplementedError

    def list_open_checked_in_before(self, *, before: datetime, limit: int = 500) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_facility(
        self,
        *,
        facility_id: int,
        subject_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_with_subjects(self, *, facility_id: int, start: datetime, end: datetime) -> Sequence[AttendanceListRow]:
        raise NotImplementedError

    def latest_for_subject(
        self, *, subject_id: int, facility_id: int, start: datetime, end: datetime
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_subject(self, subject_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_checkins(self, *, facility_id: int, start: datetime, end: datetime) -> int:
        raise NotImplementedError

    def count_open(self, *, facility_id: int, start: datetime, end: datetime) -> int:
        raise NotImplementedError

    def count_unique_subjects(self, *, facility_id: int, start: datetime, end: datetime) -> int:
        raise NotImplementedError

    def list_checkin_times(self, *, facility_id: int, start: datetime, end: datetime) -> Sequence[datetime]:
        raise NotImplementedError
