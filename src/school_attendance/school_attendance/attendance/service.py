from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..core.constants import DEFAULT_RECORDS_DAYS
from ..core.exceptions import DuplicateError, HolidayRejection, NotFoundError, ValidationError
from ..holidays.service import HolidayService
from ..policies.service import PolicyService
from ..roster.repository import RosterRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, CheckInResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Check-in writer: one classified record per student and day."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        roster: RosterRepository,
        policies: PolicyService,
        holidays: HolidayService,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._roster = roster
        self._policies = policies
        self._holidays = holidays
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def record_check_in(self, student_id: int, event_time: datetime) -> CheckInResult:
        student = self._roster.get_student(int(student_id))
        if not student:
            raise NotFoundError("Student not found")

        today = event_time.date()
        check = self._holidays.is_holiday(today)
        if check.holiday:
            logger.warning("Check-in refused for student %s on holiday %s (%s)", student.student_id, today, check.name)
            raise HolidayRejection(
                f"{today:%Y-%m-%d} is not a school day ({check.name})",
                name=check.name,
                kind=check.kind.value if check.kind else None,
            )

        # Fast path only; the unique key on (student, date) decides races.
        if self._attendance.get_for_student_and_date(student.student_id, today):
            raise DuplicateError("Attendance has already been recorded for this student today")

        policy = self._policies.get_active_policy()
        strategy = self._factory.for_checkin(now=event_time, policy=policy)
        decision = strategy.decide_checkin(now=event_time, policy=policy)

        attendance_id = self._attendance.create_checkin(
            student_id=student.student_id,
            attendance_date=today,
            check_in_time=event_time.time().replace(microsecond=0),
            status=decision.status,
        )
        logger.info(
            "Check-in recorded: student=%s date=%s status=%s policy=%s%s",
            student.student_id,
            today,
            decision.status.value,
            policy.policy_id,
            f" ({decision.note})" if decision.note else "",
        )

        record = self._attendance.get_by_id(attendance_id)
        if record is None:
            raise RuntimeError(f"Attendance record {attendance_id} missing after insert")
        return CheckInResult(status=decision.status, record=record)

    def get_record(self, student_id: int, attendance_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_student_and_date(int(student_id), attendance_date)
        if record is None:
            raise NotFoundError("Attendance record not found")
        return record

    def list_for_student(
        self,
        student_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        today = today or date.today()
        if start is None or end is None:
            start, end = today - timedelta(days=DEFAULT_RECORDS_DAYS), today
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self._attendance.list_for_student(int(student_id), start=start, end=end)
