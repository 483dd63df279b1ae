from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Roster entry owned by the roster service; read-only here."""

    student_id: int
    name: str
    student_number: str
    grade: int
    class_no: int
    number: int
    card_id: Optional[str] = None

    @property
    def sort_key(self) -> tuple[int, int, int, int]:
        return (self.grade, self.class_no, self.number, self.student_id)


@dataclass(frozen=True)
class RosterScope:
    """Subset of the roster a query is restricted to (None = no restriction)."""

    grade: Optional[int] = None
    class_no: Optional[int] = None

    def matches(self, student: Student) -> bool:
        if self.grade is not None and student.grade != self.grade:
            return False
        if self.class_no is not None and student.class_no != self.class_no:
            return False
        return True
