from __future__ import annotations

from datetime import date, time
from typing import Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, translate_duplicate
from ..roster.model import RosterScope
from ..roster.mysql_student_repository import scope_clauses
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "ar.attendance_id, ar.student_id, ar.attendance_date, ar.check_in_time, ar.status, ar.created_at, ar.updated_at"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        check_in_time=normalize_mysql_time(r.get("check_in_time")),
        status=AttendanceStatus(r["status"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.student_id=%s AND ar.attendance_date=%s
                """,
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_checkin(
        self,
        *,
        student_id: int,
        attendance_date: date,
        check_in_time: time,
        status: AttendanceStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            with translate_duplicate("Attendance has already been recorded for this student today"):
                cur.execute(
                    """
                    INSERT INTO attendance_records(student_id, attendance_date, check_in_time, status)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (int(student_id), attendance_date, check_in_time, status.value),
                )
            return int(cur.lastrowid)

    def upsert(
        self,
        *,
        student_id: int,
        attendance_date: date,
        check_in_time: Optional[time],
        status: AttendanceStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, attendance_date, check_in_time, status)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in_time=VALUES(check_in_time),
                    status=VALUES(status),
                    attendance_id=LAST_INSERT_ID(attendance_id)
                """,
                (int(student_id), attendance_date, check_in_time, status.value),
            )
            # LAST_INSERT_ID(attendance_id) makes lastrowid the existing id on update.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT attendance_id FROM attendance_records WHERE student_id=%s AND attendance_date=%s",
                (int(student_id), attendance_date),
            )
            r = fetchone(cur)
            return int(r["attendance_id"]) if r else 0

    def list_for_date(self, attendance_date: date, scope: Optional[RosterScope] = None) -> Sequence[AttendanceRecord]:
        clauses, params = scope_clauses(scope)
        clauses.insert(0, "ar.attendance_date=%s")
        params.insert(0, attendance_date)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                JOIN students st ON st.student_id = ar.student_id
                WHERE {where}
                ORDER BY st.grade ASC, st.class_no ASC, st.number ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.student_id=%s AND ar.attendance_date BETWEEN %s AND %s
                ORDER BY ar.attendance_date DESC
                """,
                (int(student_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_by_status(
        self,
        *,
        start: date,
        end: date,
        scope: Optional[RosterScope] = None,
    ) -> Mapping[AttendanceStatus, int]:
        clauses, params = scope_clauses(scope)
        clauses.insert(0, "ar.attendance_date BETWEEN %s AND %s")
        params[0:0] = [start, end]
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ar.status, COUNT(*) AS n
                FROM attendance_records ar
                JOIN students st ON st.student_id = ar.student_id
                WHERE {where}
                GROUP BY ar.status
                """,
                tuple(params),
            )
            counts = {status: 0 for status in AttendanceStatus}
            for r in fetchall(cur):
                counts[AttendanceStatus(r["status"])] = int(r["n"])
            return counts
