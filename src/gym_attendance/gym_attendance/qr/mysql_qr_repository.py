from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import QrConfig
from .repository import QrConfigRepository


def _to_config(r: dict) -> QrConfig:
    return QrConfig(
        facility_id=int(r["facility_id"]),
        secret=r["secret"],
        is_enabled=bool(r["is_enabled"]),
        last_rotated_at=r["last_rotated_at"],
        created_at=r.get("created_at"),
    )


class MySQLQrConfigRepository(QrConfigRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, facility_id: int) -> Optional[QrConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select(cur, facility_id)

    def create(self, *, facility_id: int, secret: str, now: datetime) -> QrConfig:
        with db_cursor(self._conn_factory) as (_, cur):
            # Concurrent creators converge on one row per facility.
            cur.execute(
                """
                INSERT INTO attendance_qr_config(facility_id, secret, is_enabled, last_rotated_at, created_at)
                VALUES(%s, %s, 1, %s, %s)
                ON DUPLICATE KEY UPDATE facility_id=facility_id
                """,
                (int(facility_id), secret, now, now),
            )
            return self._select(cur, facility_id)

    def rotate_secret(self, *, facility_id: int, secret: str, now: datetime) -> Optional[QrConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_qr_config
                SET secret=%s, last_rotated_at=%s, is_enabled=1
                WHERE facility_id=%s
                """,
                (secret, now, int(facility_id)),
            )
            if cur.rowcount == 0:
                return None
            return self._select(cur, facility_id)

    def set_enabled(self, *, facility_id: int, is_enabled: bool) -> Optional[QrConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_qr_config SET is_enabled=%s WHERE facility_id=%s",
                (1 if is_enabled else 0, int(facility_id)),
            )
            return self._select(cur, facility_id)

    @staticmethod
    def _select(cur, facility_id: int) -> Optional[QrConfig]:
        cur.execute(
            """
            SELECT facility_id, secret, is_enabled, last_rotated_at, created_at
            FROM attendance_qr_config
            WHERE facility_id=%s
            """,
            (int(facility_id),),
        )
        r = fetchone(cur)
        return _to_config(r) if r else None
