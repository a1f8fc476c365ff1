from __future__ import annotations

from typing import Optional

from ..core.enums import SubjectKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Subject
from .repository import SubjectRepository


def _to_subject(r: dict) -> Subject:
    return Subject(
        subject_id=int(r["subject_id"]),
        facility_id=int(r["facility_id"]),
        kind=SubjectKind(r["kind"]),
        full_name=r["full_name"],
        user_id=int(r["user_id"]) if r.get("user_id") is not None else None,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLSubjectRepository(SubjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, subject_id: int) -> Optional[Subject]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT subject_id, facility_id, kind, full_name, user_id, is_active
                FROM subjects
                WHERE subject_id=%s
                """,
                (int(subject_id),),
            )
            r = fetchone(cur)
            return _to_subject(r) if r else None

    def get_by_user(self, user_id: int, *, facility_id: Optional[int] = None) -> Optional[Subject]:
        sql = """
            SELECT subject_id, facility_id, kind, full_name, user_id, is_active
            FROM subjects
            WHERE user_id=%s
        """
        params: list = [int(user_id)]
        if facility_id is not None:
            sql += " AND facility_id=%s"
            params.append(int(facility_id))
        sql += " ORDER BY subject_id LIMIT 1"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            r = fetchone(cur)
            return _to_subject(r) if r else None
