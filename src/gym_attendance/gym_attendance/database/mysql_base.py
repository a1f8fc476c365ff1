from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateOpenSession, StorageError, TransientStorageError
from .connection import DatabaseConnection

OPEN_SESSION_INDEX = "uq_attendance_open_session"

_TRANSIENT_ERRNOS = {
    errorcode.ER_LOCK_WAIT_TIMEOUT,
    errorcode.ER_LOCK_DEADLOCK,
    errorcode.CR_SERVER_GONE_ERROR,
    errorcode.CR_SERVER_LOST,
    errorcode.CR_CONN_HOST_ERROR,
}


def translate_error(err: mysql.connector.Error) -> StorageError:
    """Map driver errors onto the storage exceptions services understand."""

    if err.errno == errorcode.ER_DUP_ENTRY and OPEN_SESSION_INDEX in str(err):
        return DuplicateOpenSession(str(err))
    if err.errno in _TRANSIENT_ERRNOS:
        return TransientStorageError(str(err))
    return StorageError(str(err))


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise translate_error(e) from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        raise translate_error(e) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
