import mysql.connector
import pytest
from mysql.connector import errorcode

from src.gym_attendance.gym_attendance.core.exceptions import DuplicateOpenSession, StorageError, TransientStorageError
from src.gym_attendance.gym_attendance.database.bootstrap import split_statements, strip_database_directives
from src.gym_attendance.gym_attendance.database.mysql_base import db_cursor, translate_error


def test_split_statements_ignores_comments_and_quoted_semicolons():
    sql = """
    -- facilities; first
    CREATE TABLE a (name VARCHAR(10) DEFAULT 'x;y');
    INSERT INTO a VALUES ('it''s -- fine');
    SELECT 1
    """

    statements = list(split_statements(sql))

    assert statements == [
        "CREATE TABLE a (name VARCHAR(10) DEFAULT 'x;y')",
        "INSERT INTO a VALUES ('it''s -- fine')",
        "SELECT 1",
    ]


def test_strip_database_directives():
    sql = "CREATE DATABASE IF NOT EXISTS gym;\nUSE gym;\nCREATE TABLE t (id INT);\n"
    assert list(split_statements(strip_database_directives(sql))) == ["CREATE TABLE t (id INT)"]


@pytest.mark.parametrize(
    "errno, msg, expected",
    [
        (errorcode.ER_DUP_ENTRY, "Duplicate entry '1-5-1' for key 'uq_attendance_open_session'", DuplicateOpenSession),
        (errorcode.ER_DUP_ENTRY, "Duplicate entry '7' for key 'PRIMARY'", StorageError),
        (errorcode.ER_LOCK_DEADLOCK, "Deadlock found", TransientStorageError),
        (errorcode.ER_LOCK_WAIT_TIMEOUT, "Lock wait timeout exceeded", TransientStorageError),
        (errorcode.CR_SERVER_LOST, "Lost connection", TransientStorageError),
    ],
)
def test_translate_error(errno, msg, expected):
    err = translate_error(mysql.connector.Error(msg=msg, errno=errno))
    assert type(err) is expected


class FakeCursor:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.cursor_obj = FakeCursor()
        self.committed = self.rolled_back = self.closed = False

    def cursor(self, dictionary=False):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self):
        self.conn = FakeConnection()

    def connect(self):
        return self.conn


def test_db_cursor_commits():
    factory = FakeFactory()
    with db_cursor(factory) as (_, cur):
        assert cur is factory.conn.cursor_obj

    assert factory.conn.committed and factory.conn.closed
    assert not factory.conn.rolled_back


def test_db_cursor_translates_driver_errors_and_rolls_back():
    factory = FakeFactory()
    with pytest.raises(TransientStorageError):
        with db_cursor(factory):
            raise mysql.connector.Error(msg="Deadlock found", errno=errorcode.ER_LOCK_DEADLOCK)

    assert factory.conn.rolled_back and factory.conn.closed
    assert not factory.conn.committed
    assert factory.conn.cursor_obj.closed
