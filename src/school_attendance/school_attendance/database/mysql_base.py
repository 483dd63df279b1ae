from __future__ import annotations

import contextvars
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..core.exceptions import DuplicateError
from .connection import DatabaseConnection

# Connection of the transaction opened by `transaction()` in the current context.
_active_conn: contextvars.ContextVar[Optional[Any]] = contextvars.ContextVar("school_attendance_tx", default=None)


@contextmanager
def transaction(conn_factory: DatabaseConnection, *, readonly: bool = False, consistent_snapshot: bool = False):
    """Run every `db_cursor` opened inside the block on one connection, committed once.

    Nested calls join the outer transaction.
    """

    if _active_conn.get() is not None:
        yield _active_conn.get()
        return

    conn = conn_factory.connect()
    token = _active_conn.set(conn)
    try:
        conn.start_transaction(consistent_snapshot=consistent_snapshot, readonly=readonly)
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        _active_conn.reset(token)
        conn.close()


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    shared = _active_conn.get()
    if shared is not None:
        cur = shared.cursor(dictionary=dictionary)
        try:
            yield shared, cur
        finally:
            cur.close()
        return

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def in_transaction() -> bool:
    return _active_conn.get() is not None


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(error: Exception) -> bool:
    return isinstance(error, mysql_errors.IntegrityError) and getattr(error, "errno", None) == errorcode.ER_DUP_ENTRY


@contextmanager
def translate_duplicate(message: str) -> Iterator[None]:
    """Surface unique-key violations as DuplicateError; other DB errors propagate untouched."""

    try:
        yield
    except mysql_errors.IntegrityError as e:
        if is_duplicate_key(e):
            raise DuplicateError(message) from e
        raise


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
