from __future__ import annotations

from datetime import time, timedelta

import pytest
from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from src.school_attendance.school_attendance.core.exceptions import DuplicateError
from src.school_attendance.school_attendance.database.bootstrap import iter_sql_statements
from src.school_attendance.school_attendance.database.mysql_base import (
    db_cursor,
    in_transaction,
    normalize_mysql_time,
    transaction,
    translate_duplicate,
)


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.closed = False

    def execute(self, sql, params=None):
        self.conn.executed.append(sql)

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.executed: list[str] = []
        self.started = None
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def start_transaction(self, **kwargs):
        self.started = kwargs

    def cursor(self, dictionary=True):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class FakeConnFactory:
    def __init__(self):
        self.connections: list[FakeConnection] = []

    def connect(self):
        conn = FakeConnection()
        self.connections.append(conn)
        return conn


def test_cursors_inside_transaction_share_one_connection_and_commit_once():
    factory = FakeConnFactory()

    with transaction(factory) as conn:
        assert in_transaction()
        with db_cursor(factory) as (c1, cur):
            cur.execute("UPDATE a")
        with db_cursor(factory) as (c2, cur):
            cur.execute("INSERT b")

    assert c1 is c2 is conn
    assert len(factory.connections) == 1
    assert conn.executed == ["UPDATE a", "INSERT b"]
    assert conn.commits == 1
    assert conn.closed
    assert not in_transaction()


def test_transaction_rolls_back_on_error():
    factory = FakeConnFactory()

    with pytest.raises(RuntimeError):
        with transaction(factory):
            with db_cursor(factory) as (_, cur):
                cur.execute("UPDATE a")
            raise RuntimeError("boom")

    conn = factory.connections[0]
    assert (conn.commits, conn.rollbacks) == (0, 1)
    assert not in_transaction()


def test_nested_transaction_joins_outer():
    factory = FakeConnFactory()

    with transaction(factory) as outer:
        with transaction(factory, readonly=True) as inner:
            assert inner is outer

    assert len(factory.connections) == 1
    assert outer.commits == 1


def test_snapshot_flags_are_forwarded():
    factory = FakeConnFactory()

    with transaction(factory, readonly=True, consistent_snapshot=True):
        pass

    assert factory.connections[0].started == {"consistent_snapshot": True, "readonly": True}


def test_standalone_cursor_commits_its_own_connection():
    factory = FakeConnFactory()

    with db_cursor(factory) as (conn, cur):
        cur.execute("SELECT 1")

    assert conn.commits == 1
    assert conn.closed


def test_translate_duplicate_only_maps_duplicate_key():
    with pytest.raises(DuplicateError, match="already"):
        with translate_duplicate("already recorded"):
            raise mysql_errors.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)

    with pytest.raises(mysql_errors.IntegrityError):
        with translate_duplicate("already recorded"):
            raise mysql_errors.IntegrityError(msg="FK fails", errno=errorcode.ER_NO_REFERENCED_ROW_2)


def test_normalize_mysql_time():
    assert normalize_mysql_time(timedelta(hours=8, minutes=5, seconds=3)) == time(8, 5, 3)
    assert normalize_mysql_time("07:30") == time(7, 30)
    assert normalize_mysql_time(None) is None


def test_sql_splitter_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- header; with semicolon
    CREATE TABLE a (x INT);
    INSERT INTO a VALUES ('x;y'), ('It''s');
    """

    assert list(iter_sql_statements(sql)) == [
        "CREATE TABLE a (x INT)",
        "INSERT INTO a VALUES ('x;y'), ('It''s')",
    ]
