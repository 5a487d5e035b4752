"""Schema and demo-data bootstrap for the MySQL backend."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Mapping

import mysql.connector

from ..core.constants import DEFAULT_TERRITORY_RADIUS_METERS
from ..users.mysql_user_repository import MySQLUserRepository
from .connection import DatabaseConnection, DBConfig
from .seed import seed_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[4] / "database" / "schema.sql"


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql must work whatever the configured database name is
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside of quoted strings."""
    buf: list[str] = []
    quote = ""
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = ""
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: Mapping) -> None:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    target = conn.config
    raw = conn.connect(with_database=False)
    try:
        cur = raw.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        raw.commit()
    finally:
        raw.close()


def apply_schema(db_config: Mapping, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = _strip_line_comments(_strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8")))

    raw = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = raw.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
        raw.commit()
    except mysql.connector.Error:
        raw.rollback()
        raise
    finally:
        raw.close()
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_users(db_config: Mapping, *, radius_meters: float = DEFAULT_TERRITORY_RADIUS_METERS) -> int:
    users = MySQLUserRepository(DatabaseConnection(DBConfig.from_mapping(db_config)))
    added = seed_users(users, radius_meters=radius_meters)
    logger.info("Demo users ready (%d added)", added)
    return added


def list_tables(db_config: Mapping) -> list[str]:
    raw = DatabaseConnection(DBConfig.from_mapping(db_config)).connect()
    try:
        cur = raw.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        raw.close()
