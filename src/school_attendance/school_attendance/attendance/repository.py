from __future__ import annotations

from datetime import date, time
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from ..roster.model import RosterScope
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_date(self, student_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        student_id: int,
        attendance_date: date,
        check_in_time: time,
        status: AttendanceStatus,
    ) -> int:
        """Insert the day's record.

        The (student, date) unique key is the duplicate guard: a violation is
        raised as DuplicateError.
        """

        raise NotImplementedError

    def upsert(
        self,
        *,
        student_id: int,
        attendance_date: date,
        check_in_time: Optional[time],
        status: AttendanceStatus,
    ) -> int:
        """Create or overwrite the day's record (absence approval, admin correction only)."""

        raise NotImplementedError

    def list_for_date(self, attendance_date: date, scope: Optional[RosterScope] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_by_status(
        self,
        *,
        start: date,
        end: date,
        scope: Optional[RosterScope] = None,
    ) -> Mapping[AttendanceStatus, int]:
        raise NotImplementedError
