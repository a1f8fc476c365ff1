from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from .attendance.factory import CutoffStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.queries import AttendanceQueryService
from .attendance.reconciler import AutoCheckoutReconciler
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_utc
from .common.retry import RetryPolicy
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .qr.mysql_qr_repository import MySQLQrConfigRepository
from .qr.repository import QrConfigRepository
from .qr.service import QrAttendanceService
from .subjects.mysql_subject_repository import MySQLSubjectRepository
from .subjects.repository import SubjectRepository


@dataclass(frozen=True)
class AttendanceOptions:
    timezone: str = constants.DEFAULT_FACILITY_TIMEZONE
    end_of_day_cutoff: bool = True
    max_session_hours: Optional[float] = constants.DEFAULT_MAX_SESSION_HOURS
    poll_seconds: int = constants.DEFAULT_POLL_SECONDS
    retry_backoff_seconds: float = constants.DEFAULT_RETRY_BACKOFF_SECONDS

    @classmethod
    def from_settings(cls, settings) -> "AttendanceOptions":
        return cls(
            timezone=getattr(settings, "FACILITY_TIMEZONE", constants.DEFAULT_FACILITY_TIMEZONE),
            end_of_day_cutoff=bool(getattr(settings, "AUTO_CHECKOUT_END_OF_DAY", True)),
            max_session_hours=getattr(settings, "AUTO_CHECKOUT_MAX_SESSION_HOURS", constants.DEFAULT_MAX_SESSION_HOURS),
            poll_seconds=int(getattr(settings, "DASHBOARD_POLL_SECONDS", constants.DEFAULT_POLL_SECONDS)),
            retry_backoff_seconds=float(
                getattr(settings, "STORAGE_RETRY_BACKOFF_SECONDS", constants.DEFAULT_RETRY_BACKOFF_SECONDS)
            ),
        )


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    subjects_repo: SubjectRepository
    qr_repo: QrConfigRepository

    attendance_service: AttendanceService
    query_service: AttendanceQueryService
    reconciler: AutoCheckoutReconciler
    qr_service: QrAttendanceService

    tz: ZoneInfo
    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    attendance_repo: AttendanceRepository,
    subjects_repo: SubjectRepository,
    qr_repo: QrConfigRepository,
    options: AttendanceOptions | None = None,
    conn: DatabaseConnection | None = None,
    clock: Callable[[], datetime] = now_utc,
) -> Container:
    """Wire services over any repository implementations (MySQL in the app, fakes in tests)."""

    options = options or AttendanceOptions()
    tz = ZoneInfo(options.timezone)
    cutoff = CutoffStrategyFactory(tz=tz).build(
        end_of_day=options.end_of_day_cutoff,
        max_session_hours=options.max_session_hours,
    )
    retry = RetryPolicy(attempts=2, backoff_seconds=options.retry_backoff_seconds)

    attendance_service = AttendanceService(attendance_repo, subjects_repo, cutoff=cutoff, retry=retry, clock=clock)
    query_service = AttendanceQueryService(attendance_repo, tz=tz, poll_seconds=options.poll_seconds, clock=clock)
    reconciler = AutoCheckoutReconciler(attendance_repo, cutoff=cutoff, clock=clock)
    qr_service = QrAttendanceService(qr_repo, subjects_repo, attendance_service, clock=clock)

    return Container(
        attendance_repo=attendance_repo,
        subjects_repo=subjects_repo,
        qr_repo=qr_repo,
        attendance_service=attendance_service,
        query_service=query_service,
        reconciler=reconciler,
        qr_service=qr_service,
        tz=tz,
        conn=conn,
    )


def build_container(*, db_config: dict, options: AttendanceOptions | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        attendance_repo=MySQLAttendanceRepository(conn),
        subjects_repo=MySQLSubjectRepository(conn),
        qr_repo=MySQLQrConfigRepository(conn),
        options=options,
        conn=conn,
    )
