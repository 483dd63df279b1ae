from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..core.enums import ReportAction, ReportStatus
from ..core.exceptions import InvalidStateError
from .model import ExceptionReport

_OUTCOMES = {
    ReportAction.APPROVE: ReportStatus.APPROVED,
    ReportAction.REJECT: ReportStatus.REJECTED,
}


def transition(
    report: ExceptionReport,
    action: ReportAction,
    *,
    processor: int,
    at: datetime,
    notes: Optional[str] = None,
    response: Optional[str] = None,
) -> ExceptionReport:
    """Decide a pending report. No I/O; the caller persists the result."""

    if report.status != ReportStatus.PENDING:
        raise InvalidStateError(f"Report {report.report_id} has already been {report.status.value}")

    return replace(
        report,
        status=_OUTCOMES[action],
        processed_by=int(processor),
        processed_at=at,
        notes=notes,
        processor_response=response,
    )
