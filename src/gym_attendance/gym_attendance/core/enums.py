from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles carried in the session by the auth layer."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    TRAINER = "trainer"
    MEMBER = "member"


class AttendanceStatus(str, Enum):
    IN = "in"
    OUT = "out"


class ExitType(str, Enum):
    """How a session ended: operator-initiated or forced after the cutoff."""

    MANUAL = "manual"
    AUTO = "auto"


class CheckInSource(str, Enum):
    MANUAL = "manual"
    QR_SCAN = "qr_scan"
    CLASS = "class"


class AttendanceAction(str, Enum):
    CHECK_IN = "checkIn"
    CHECK_OUT = "checkOut"


class SubjectKind(str, Enum):
    MEMBER = "member"
    TRAINER = "trainer"


class StatsPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
