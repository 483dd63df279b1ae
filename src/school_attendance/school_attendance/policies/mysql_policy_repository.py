from __future__ import annotations

from datetime import time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, translate_duplicate
from .model import AttendancePolicy
from .repository import PolicyRepository

_SELECT = """
    SELECT policy_id, start_time, late_time, end_time, is_active, created_at, created_by
    FROM attendance_policies
"""


def _to_policy(r: dict) -> AttendancePolicy:
    return AttendancePolicy(
        policy_id=int(r["policy_id"]),
        start_time=normalize_mysql_time(r["start_time"]),
        late_time=normalize_mysql_time(r["late_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        is_active=bool(r["is_active"]),
        created_at=r["created_at"],
        created_by=r.get("created_by"),
    )


class MySQLPolicyRepository(PolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self) -> Optional[AttendancePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE is_active=1 ORDER BY created_at DESC, policy_id DESC LIMIT 1")
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def get_by_id(self, policy_id: int) -> Optional[AttendancePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE policy_id=%s", (int(policy_id),))
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def deactivate_active(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE attendance_policies SET is_active=0 WHERE is_active=1")
            return int(cur.rowcount)

    def insert_active(
        self,
        *,
        start_time: time,
        late_time: time,
        end_time: time,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            with translate_duplicate("Another attendance policy is already active"):
                cur.execute(
                    """
                    INSERT INTO attendance_policies(start_time, late_time, end_time, is_active, created_by)
                    VALUES(%s,%s,%s,1,%s)
                    """,
                    (start_time, late_time, end_time, created_by),
                )
            return int(cur.lastrowid)

    def list_history(self, *, limit: int, offset: int) -> Sequence[AttendancePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " ORDER BY created_at DESC, policy_id DESC LIMIT %s OFFSET %s",
                (int(limit), int(offset)),
            )
            return [_to_policy(r) for r in fetchall(cur)]

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_policies")
            r = fetchone(cur)
            return int(r["n"]) if r else 0
