from __future__ import annotations

import json
import logging
import threading
from typing import Any, Optional

import pg8000.dbapi as pgapi

from drawapp.core.config import db_configured, settings
from drawapp.db.schema import ensure_schema

logger = logging.getLogger(__name__)

_DB_LOCAL = threading.local()
_SCHEMA_READY = False
_SCHEMA_LOCK = threading.Lock()


def _connect():
    if not db_configured():
        raise RuntimeError("Database configuration is missing")
    return pgapi.connect(
        host=settings.db_host,
        port=settings.db_port,
        database=settings.db_name,
        user=settings.db_user,
        password=settings.db_password,
        application_name="drawapp",
    )


def _ensure_schema(conn) -> None:
    global _SCHEMA_READY
    if _SCHEMA_READY:
        return
    with _SCHEMA_LOCK:
        if _SCHEMA_READY:
            return
        ensure_schema(conn)
        _SCHEMA_READY = True


def get_conn():
    # One autocommit connection per thread; sweep workers each get their own.
    conn = getattr(_DB_LOCAL, "conn", None)
    if conn is not None:
        try:
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.close()
        except pgapi.Error:
            logger.warning("Database connection lost; reconnecting")
            conn = None
    if conn is None:
        conn = _connect()
        conn.autocommit = True
        _DB_LOCAL.conn = conn
    if settings.auto_migrate:
        _ensure_schema(conn)
    return conn


def close_conn() -> None:
    conn = getattr(_DB_LOCAL, "conn", None)
    if conn is None:
        return
    _DB_LOCAL.conn = None
    try:
        conn.close()
    except pgapi.Error:
        logger.warning("Failed to close database connection", exc_info=True)


def jsonb(value: Any) -> str:
    return json.dumps(value, default=str)


def _rows_as_dicts(cur) -> list[dict]:
    columns = [col[0] for col in cur.description]
    return [dict(zip(columns, row)) for row in cur.fetchall()]


def fetch_all(sql: str, params: tuple = ()) -> list[dict]:
    cur = get_conn().cursor()
    try:
        cur.execute(sql, params)
        return _rows_as_dicts(cur)
    finally:
        cur.close()


def fetch_one(sql: str, params: tuple = ()) -> Optional[dict]:
    rows = fetch_all(sql, params)
    return rows[0] if rows else None


def execute(sql: str, params: tuple = ()) -> int:
    cur = get_conn().cursor()
    try:
        cur.execute(sql, params)
        return cur.rowcount
    finally:
        cur.close()
