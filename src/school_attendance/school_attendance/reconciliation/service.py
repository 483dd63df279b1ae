from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds
from ..common.validators import require_choice
from ..core.enums import AttendanceStatus, ReportType
from ..database.transaction import TransactionManager
from ..holidays.service import HolidayService
from ..reports.repository import ReportRepository
from ..roster.model import RosterScope
from ..roster.repository import RosterRepository
from .model import DayEntry, DayView, UnresolvedEntry


class ReconciliationService:
    """Read-only views over roster, attendance records and approved reports."""

    def __init__(
        self,
        roster: RosterRepository,
        attendance: AttendanceRepository,
        reports: ReportRepository,
        holidays: HolidayService,
        tx: TransactionManager,
    ):
        self._roster = roster
        self._attendance = attendance
        self._reports = reports
        self._holidays = holidays
        self._tx = tx

    def unresolved(self, day: date, scope: Optional[RosterScope] = None) -> List[UnresolvedEntry]:
        """Students without a settled status on `day`, ordered by grade, class, number.

        On a holiday nobody is expected, so the result is empty.
        """

        with self._tx.snapshot():
            if self._holidays.is_holiday(day).holiday:
                return []
            students = self._roster.list_students(scope)
            records = {r.student_id: r for r in self._attendance.list_for_date(day, scope)}
            approved: Dict[int, set] = {}
            for report in self._reports.list_approved_for_date(day, scope):
                approved.setdefault(report.student_id, set()).add(report.report_type)

        result: List[UnresolvedEntry] = []
        for student in sorted(students, key=lambda s: s.sort_key):
            record = records.get(student.student_id)
            types = approved.get(student.student_id, set())
            if record is None:
                if not types:
                    result.append(UnresolvedEntry(student=student, status=AttendanceStatus.ABSENT))
            elif record.status == AttendanceStatus.LATE and ReportType.LATE not in types:
                result.append(UnresolvedEntry(student=student, status=AttendanceStatus.LATE, record=record))
        return result

    def day_view(
        self,
        day: date,
        scope: Optional[RosterScope] = None,
        status=None,
    ) -> DayView:
        """Every roster student with their record; students without one show as absent."""

        status = require_choice(status, AttendanceStatus, "attendance status") if status else None

        with self._tx.snapshot():
            students = self._roster.list_students(scope)
            records = {r.student_id: r for r in self._attendance.list_for_date(day, scope)}

        entries: List[DayEntry] = []
        for student in sorted(students, key=lambda s: s.sort_key):
            record = records.get(student.student_id)
            entries.append(
                DayEntry(
                    student=student,
                    status=record.status if record else AttendanceStatus.ABSENT,
                    record=record,
                )
            )

        summary = {s: 0 for s in AttendanceStatus}
        for entry in entries:
            summary[entry.status] += 1

        if status is not None:
            entries = [e for e in entries if e.status == status]
        return DayView(attendance_date=day, entries=entries, summary=summary)

    def monthly_stats(self, *, year: int, month: int, scope: Optional[RosterScope] = None) -> Dict[AttendanceStatus, int]:
        start, end = month_bounds(year, month)
        counts = self._attendance.count_by_status(start=start, end=end, scope=scope)
        return {s: int(counts.get(s, 0)) for s in AttendanceStatus}

