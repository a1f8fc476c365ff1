from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_CREATE_DB = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DB = re.compile(r"(?im)^\s*USE\b.*?;\s*$")

# Quoted literals are matched whole so a ';' or '--' inside them is ignored.
_SQL_TOKEN = re.compile(
    r"""'(?:[^'\\]|\\.)*'"""
    r'''|"(?:[^"\\]|\\.)*"'''
    r"|`[^`]*`"
    r"|--[^\n]*"
    r"|;",
    re.S,
)


def strip_database_directives(sql: str) -> str:
    """Drop CREATE DATABASE / USE so the schema lands in the configured database."""
    return _USE_DB.sub("", _CREATE_DB.sub("", sql))


def split_statements(sql: str) -> Iterator[str]:
    pieces: list[str] = []
    pos = 0
    for match in _SQL_TOKEN.finditer(sql):
        token = match.group(0)
        if token.startswith("--"):
            pieces.append(sql[pos:match.start()])
            pos = match.end()
        elif token == ";":
            pieces.append(sql[pos:match.start()])
            pos = match.end()
            statement = "".join(pieces).strip()
            pieces = []
            if statement:
                yield statement

    pieces.append(sql[pos:])
    tail = "".join(pieces).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    name = conn_factory.config.database
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> None:
    """Create the database if needed and run every statement of the schema file.

    The schema only uses IF NOT EXISTS forms, so running it again is harmless.
    """

    ensure_database_exists(conn_factory)
    sql = strip_database_directives(Path(schema_path).read_text(encoding="utf-8"))

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        count = 0
        for statement in split_statements(sql):
            cur.execute(statement)
            count += 1
        conn.commit()
    finally:
        conn.close()
    logger.info("applied %d schema statements from %s", count, schema_path)


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(row[0] for row in cur.fetchall())
    finally:
        conn.close()
