from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_choice, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AttendanceStatus, ReportAction, ReportStatus, ReportType, Role, STAFF_ROLES
from ..core.exceptions import AuthorizationError, DuplicateError, InvalidStateError, NotFoundError
from ..database.transaction import TransactionManager
from ..policies.model import AttendancePolicy
from ..policies.service import PolicyService
from ..roster.repository import RosterRepository
from .model import ExceptionReport, NewReport, ReportFilter
from .projection import apply_approved_absence
from .repository import ReportRepository
from .workflow import transition

logger = logging.getLogger(__name__)

# Audit report type written alongside a correction to each status.
CORRECTION_REPORT_TYPES = {
    AttendanceStatus.ABSENT: ReportType.ABSENCE,
    AttendanceStatus.LATE: ReportType.LATE,
    # Moving a day to on_time overturns a late arrival, so it is filed as a late explanation.
    AttendanceStatus.ON_TIME: ReportType.LATE,
}


def correction_check_in_time(status: AttendanceStatus, policy: AttendancePolicy) -> Optional[time]:
    if status == AttendanceStatus.ON_TIME:
        return policy.start_time
    if status == AttendanceStatus.LATE:
        return policy.late_time
    return None


class ReportService:
    """Exception report workflow: pending -> approved | rejected."""

    def __init__(
        self,
        reports: ReportRepository,
        attendance: AttendanceRepository,
        roster: RosterRepository,
        policies: PolicyService,
        tx: TransactionManager,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._reports = reports
        self._attendance = attendance
        self._roster = roster
        self._policies = policies
        self._tx = tx
        self._clock = clock

    def submit(
        self,
        *,
        student_id: int,
        report_date: date,
        report_type,
        reason: str,
        attachments: Optional[Sequence[str]] = None,
    ) -> ExceptionReport:
        new = self._validated(
            student_id=student_id,
            report_date=report_date,
            report_type=report_type,
            reason=reason,
            attachments=attachments,
        )
        self._ensure_no_report(new)

        report_id = self._reports.create(new)
        logger.info(
            "Report %s submitted: student=%s date=%s type=%s",
            report_id,
            new.student_id,
            new.report_date,
            new.report_type.value,
        )
        return self.get(report_id)

    def submit_as_admin(
        self,
        *,
        student_id: int,
        report_date: date,
        report_type,
        reason: str,
        processor: int,
        notes: Optional[str] = None,
    ) -> ExceptionReport:
        """Staff declaration, stored already approved."""

        draft = self._validated(
            student_id=student_id,
            report_date=report_date,
            report_type=report_type,
            reason=reason,
        )
        new = NewReport(
            student_id=draft.student_id,
            report_date=draft.report_date,
            report_type=draft.report_type,
            reason=draft.reason,
            status=ReportStatus.APPROVED,
            admin_created=True,
            processed_by=int(processor),
            processed_at=self._clock(),
            notes=notes,
        )
        self._ensure_no_report(new)

        with self._tx.atomic():
            report_id = self._reports.create(new)
            report = self.get(report_id)
            apply_approved_absence(self._attendance, report)

        logger.info(
            "Report %s declared by %s: student=%s date=%s type=%s",
            report_id,
            processor,
            new.student_id,
            new.report_date,
            new.report_type.value,
        )
        return report

    def process(
        self,
        report_id: int,
        action,
        *,
        processor: int,
        notes: Optional[str] = None,
        response: Optional[str] = None,
    ) -> ExceptionReport:
        action = require_choice(action, ReportAction, "action")

        with self._tx.atomic():
            report = self.get(report_id)
            decided = transition(
                report,
                action,
                processor=processor,
                at=self._clock(),
                notes=notes,
                response=response,
            )
            updated = self._reports.decide(
                report_id=decided.report_id,
                status=decided.status,
                processed_by=int(processor),
                processed_at=decided.processed_at,
                notes=decided.notes,
                processor_response=decided.processor_response,
            )
            if not updated:
                logger.warning("Report %s was decided concurrently; %s by %s refused", report_id, action.value, processor)
                raise InvalidStateError(f"Report {report_id} has already been processed")
            apply_approved_absence(self._attendance, decided)

        logger.info("Report %s %s by %s", report_id, decided.status.value, processor)
        return self.get(report_id)

    def correct(
        self,
        *,
        student_id: int,
        attendance_date: date,
        new_status,
        processor: int,
        processor_role,
        reason: Optional[str] = None,
    ) -> AttendanceRecord:
        role = require_choice(processor_role, Role, "role")
        if role not in STAFF_ROLES:
            raise AuthorizationError("Only administrators can correct attendance")

        status = require_choice(new_status, AttendanceStatus, "attendance status")
        student = self._roster.get_student(int(student_id))
        if student is None:
            raise NotFoundError("Student not found")

        policy = self._policies.get_active_policy()
        reason = (reason or "").strip() or f"Administrator correction: changed to {status.value}"

        with self._tx.atomic():
            attendance_id = self._attendance.upsert(
                student_id=student.student_id,
                attendance_date=attendance_date,
                check_in_time=correction_check_in_time(status, policy),
                status=status,
            )
            self._reports.create(
                NewReport(
                    student_id=student.student_id,
                    report_date=attendance_date,
                    report_type=CORRECTION_REPORT_TYPES[status],
                    reason=reason,
                    status=ReportStatus.APPROVED,
                    admin_created=True,
                    is_correction=True,
                    processed_by=int(processor),
                    processed_at=self._clock(),
                    notes="attendance correction",
                )
            )
            record = self._attendance.get_by_id(attendance_id)

        if record is None:
            raise RuntimeError(f"Attendance record {attendance_id} missing after correction")
        logger.info(
            "Attendance corrected by %s: student=%s date=%s status=%s",
            processor,
            student.student_id,
            attendance_date,
            status.value,
        )
        return record

    def respond(self, report_id: int, response: Optional[str]) -> ExceptionReport:
        report = self.get(report_id)
        if not report.is_terminal:
            raise InvalidStateError("A pending report is answered by processing it")
        self._reports.set_response(report_id=report.report_id, processor_response=response)
        return self.get(report_id)

    def get(self, report_id: int) -> ExceptionReport:
        report = self._reports.get_by_id(int(report_id))
        if report is None:
            raise NotFoundError("Report not found")
        return report

    def list_reports(self, criteria: ReportFilter, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[ExceptionReport]:
        return self._reports.list(criteria, limit=limit)

    def list_for_student(self, student_id: int, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[ExceptionReport]:
        return self._reports.list(ReportFilter(student_id=int(student_id)), limit=limit)

    def _validated(
        self,
        *,
        student_id: int,
        report_date: date,
        report_type,
        reason: str,
        attachments: Optional[Sequence[str]] = None,
    ) -> NewReport:
        report_type = require_choice(report_type, ReportType, "report type")
        reason = require_non_empty(reason, "Reason")

        student = self._roster.get_student(int(student_id))
        if student is None:
            raise NotFoundError("Student not found")

        return NewReport(
            student_id=student.student_id,
            report_date=report_date,
            report_type=report_type,
            reason=reason,
            attachments=list(attachments) if attachments else None,
        )

    def _ensure_no_report(self, new: NewReport) -> None:
        # Fast path; the unique key on submission_slot has the final say.
        existing = self._reports.find(
            student_id=new.student_id,
            report_date=new.report_date,
            report_type=new.report_type,
        )
        if existing is not None:
            raise DuplicateError(
                f"A {new.report_type.value} report for {new.report_date:%Y-%m-%d} already exists ({existing.status.value})"
            )
