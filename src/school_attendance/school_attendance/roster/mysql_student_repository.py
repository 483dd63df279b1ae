from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import RosterScope, Student
from .repository import RosterRepository

_COLUMNS = "student_id, name, student_number, grade, class_no, number, card_id"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        name=r["name"],
        student_number=str(r["student_number"]),
        grade=int(r["grade"]),
        class_no=int(r["class_no"]),
        number=int(r["number"]),
        card_id=r.get("card_id"),
    )


def scope_clauses(scope: Optional[RosterScope], *, alias: str = "st") -> tuple[list[str], list[object]]:
    """WHERE fragments restricting a query joined to `students` to a roster scope."""

    clauses: list[str] = []
    params: list[object] = []
    if scope is not None and scope.grade is not None:
        clauses.append(f"{alias}.grade=%s")
        params.append(int(scope.grade))
    if scope is not None and scope.class_no is not None:
        clauses.append(f"{alias}.class_no=%s")
        params.append(int(scope.class_no))
    return clauses, params


class MySQLStudentRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_student(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE student_id=%s AND is_active=1",
                (int(student_id),),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_students(self, scope: Optional[RosterScope] = None) -> Sequence[Student]:
        clauses, params = scope_clauses(scope)
        clauses.insert(0, "st.is_active=1")
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {", ".join("st." + c.strip() for c in _COLUMNS.split(","))}
                FROM students st
                WHERE {where}
                ORDER BY st.grade ASC, st.class_no ASC, st.number ASC, st.student_id ASC
                """,
                tuple(params),
            )
            return [_to_student(r) for r in fetchall(cur)]
