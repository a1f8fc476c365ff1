from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import isoformat_utc
from ..core.enums import AttendanceStatus, CheckInSource, ExitType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one visit of a subject to a facility.

    Timestamps are naive UTC.
    """

    attendance_id: int
    facility_id: int
    subject_id: int
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    exit_type: Optional[ExitType]
    source: CheckInSource
    created_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status == AttendanceStatus.IN

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "facilityId": self.facility_id,
            "subjectId": self.subject_id,
            "checkInTime": isoformat_utc(self.check_in_time),
            "checkOutTime": isoformat_utc(self.check_out_time),
            "status": self.status.value,
            "exitType": self.exit_type.value if self.exit_type else None,
            "source": self.source.value,
            "createdAt": isoformat_utc(self.created_at),
        }


@dataclass(frozen=True)
class AttendanceListRow:
    """Read-model for dashboard lists (record joined with the subject's name)."""

    record: AttendanceRecord
    subject_name: Optional[str]

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data["subjectName"] = self.subject_name or "Unknown Member"
        return data


@dataclass(frozen=True)
class DailyCount:
    date: date
    checkins: int

    def to_dict(self) -> dict:
        return {"date": self.date.strftime("%Y-%m-%d"), "checkins": self.checkins}
