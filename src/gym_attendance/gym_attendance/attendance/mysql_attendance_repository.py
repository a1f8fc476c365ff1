from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, CheckInSource, ExitType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceListRow, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    a.attendance_id, a.facility_id, a.subject_id, a.check_in_time, a.check_out_time,
    a.status, a.exit_type, a.source, a.created_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        facility_id=int(r["facility_id"]),
        subject_id=int(r["subject_id"]),
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        exit_type=ExitType(r["exit_type"]) if r.get("exit_type") else None,
        source=CheckInSource(r.get("source") or CheckInSource.MANUAL.value),
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_open(self, *, subject_id: int, facility_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.subject_id=%s AND a.facility_id=%s AND a.status='in'
                ORDER BY a.check_in_time DESC
                LIMIT 1
                """,
                (int(subject_id), int(facility_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_checkin(
        self,
        *,
        facility_id: int,
        subject_id: int,
        check_in_time: datetime,
        source: CheckInSource,
    ) -> int:
        # Duplicate open sessions surface as DuplicateOpenSession via db_cursor.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(facility_id, subject_id, check_in_time, status, exit_type, source, created_at)
                VALUES(%s, %s, %s, 'in', NULL, %s, %s)
                """,
                (int(facility_id), int(subject_id), check_in_time, source.value, check_in_time),
            )
            return int(cur.lastrowid)

    def close_session(self, *, attendance_id: int, check_out_time: datetime, exit_type: ExitType) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=GREATEST(%s, check_in_time), status='out', exit_type=%s
                WHERE attendance_id=%s AND status='in'
                """,
                (check_out_time, exit_type.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def list_open_checked_in_before(self, *, before: datetime, limit: int = 500) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.status='in' AND a.check_in_time < %s
                ORDER BY a.check_in_time
                LIMIT %s
                """,
                (before, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_facility(
        self,
        *,
        facility_id: int,
        subject_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        where = ["a.facility_id=%s"]
        params: list = [int(facility_id)]
        if subject_id is not None:
            where.append("a.subject_id=%s")
            params.append(int(subject_id))
        if start is not None:
            where.append("a.check_in_time >= %s")
            params.append(start)
        if end is not None:
            where.append("a.check_in_time < %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE {' AND '.join(where)}
                ORDER BY a.check_in_time DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_with_subjects(self, *, facility_id: int, start: datetime, end: datetime) -> Sequence[AttendanceListRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, s.full_name AS subject_name
                FROM attendance_records a
                LEFT JOIN subjects s ON s.subject_id = a.subject_id
                WHERE a.facility_id=%s AND a.check_in_time >= %s AND a.check_in_time < %s
                ORDER BY a.check_in_time DESC
                """,
                (int(facility_id), start, end),
            )
            return [AttendanceListRow(record=_to_record(r), subject_name=r.get("subject_name")) for r in fetchall(cur)]

    def latest_for_subject(
        self, *, subject_id: int, facility_id: int, start: datetime, end: datetime
    ) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.subject_id=%s AND a.facility_id=%s AND a.check_in_time >= %s AND a.check_in_time < %s
                ORDER BY a.check_in_time DESC
                LIMIT 1
                """,
                (int(subject_id), int(facility_id), start, end),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_subject(self, subject_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records a
                WHERE a.subject_id=%s
                ORDER BY a.check_in_time DESC
                LIMIT %s
                """,
                (int(subject_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_checkins(self, *, facility_id: int, start: datetime, end: datetime) -> int:
        return self._scalar(
            """
            SELECT COUNT(*) AS n FROM attendance_records
            WHERE facility_id=%s AND check_in_time >= %s AND check_in_time < %s
            """,
            (int(facility_id), start, end),
        )

    def count_open(self, *, facility_id: int, start: datetime, end: datetime) -> int:
        return self._scalar(
            """
            SELECT COUNT(*) AS n FROM attendance_records
            WHERE facility_id=%s AND status='in' AND check_in_time >= %s AND check_in_time < %s
            """,
            (int(facility_id), start, end),
        )

    def count_unique_subjects(self, *, facility_id: int, start: datetime, end: datetime) -> int:
        return self._scalar(
            """
            SELECT COUNT(DISTINCT subject_id) AS n FROM attendance_records
            WHERE facility_id=%s AND check_in_time >= %s AND check_in_time < %s
            """,
            (int(facility_id), start, end),
        )

    def list_checkin_times(self, *, facility_id: int, start: datetime, end: datetime) -> Sequence[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT check_in_time FROM attendance_records
                WHERE facility_id=%s AND check_in_time >= %s AND check_in_time < %s
                """,
                (int(facility_id), start, end),
            )
            return [r["check_in_time"] for r in fetchall(cur)]

    def _scalar(self, sql: str, params: tuple) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            r = fetchone(cur)
            return int(r["n"]) if r else 0
