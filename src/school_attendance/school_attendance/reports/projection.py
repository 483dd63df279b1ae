from __future__ import annotations

import logging
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus, ReportStatus, ReportType
from .model import ExceptionReport

logger = logging.getLogger(__name__)


def apply_approved_absence(attendance: AttendanceRepository, report: ExceptionReport) -> Optional[int]:
    """Write the attendance side effect of an approved report.

    Only `absence` has one: the day's record becomes absent with no check-in
    time, overwriting whatever was there. Other types return None.
    """

    if report.status != ReportStatus.APPROVED or report.report_type != ReportType.ABSENCE:
        return None

    attendance_id = attendance.upsert(
        student_id=report.student_id,
        attendance_date=report.report_date,
        check_in_time=None,
        status=AttendanceStatus.ABSENT,
    )
    logger.info(
        "Approved absence report %s marked student %s absent on %s",
        report.report_id,
        report.student_id,
        report.report_date,
    )
    return attendance_id
