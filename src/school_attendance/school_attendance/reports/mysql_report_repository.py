from __future__ import annotations

import json
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ReportStatus, ReportType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_duplicate
from ..roster.model import RosterScope
from ..roster.mysql_student_repository import scope_clauses
from .model import ExceptionReport, NewReport, ReportFilter
from .repository import ReportRepository

_COLUMNS = """
    rp.report_id, rp.student_id, rp.report_date, rp.report_type, rp.reason, rp.status,
    rp.submitted_at, rp.processed_at, rp.processed_by, rp.admin_created, rp.is_correction,
    rp.attachments, rp.notes, rp.processor_response
"""


def _load_attachments(raw) -> Optional[list[str]]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        raw = json.loads(raw)
    return [str(a) for a in raw]


def _to_report(r: dict) -> ExceptionReport:
    return ExceptionReport(
        report_id=int(r["report_id"]),
        student_id=int(r["student_id"]),
        report_date=r["report_date"],
        report_type=ReportType(r["report_type"]),
        reason=r["reason"],
        status=ReportStatus(r["status"]),
        submitted_at=r["submitted_at"],
        processed_at=r.get("processed_at"),
        processed_by=r.get("processed_by"),
        admin_created=bool(r.get("admin_created")),
        is_correction=bool(r.get("is_correction")),
        attachments=_load_attachments(r.get("attachments")),
        notes=r.get("notes"),
        processor_response=r.get("processor_response"),
    )


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, report_id: int) -> Optional[ExceptionReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_reports rp WHERE rp.report_id=%s", (int(report_id),))
            r = fetchone(cur)
            return _to_report(r) if r else None

    def find(self, *, student_id: int, report_date: date, report_type: ReportType) -> Optional[ExceptionReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_reports rp
                WHERE rp.student_id=%s AND rp.report_date=%s AND rp.report_type=%s
                ORDER BY rp.is_correction ASC, rp.report_id ASC
                LIMIT 1
                """,
                (int(student_id), report_date, report_type.value),
            )
            r = fetchone(cur)
            return _to_report(r) if r else None

    def create(self, report: NewReport) -> int:
        attachments = json.dumps(list(report.attachments)) if report.attachments else None
        with db_cursor(self._conn_factory) as (_, cur):
            with translate_duplicate("A report of this type already exists for this student and date"):
                cur.execute(
                    """
                    INSERT INTO attendance_reports(
                        student_id, report_date, report_type, reason, status,
                        admin_created, is_correction, processed_by, processed_at,
                        attachments, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(report.student_id),
                        report.report_date,
                        report.report_type.value,
                        report.reason,
                        report.status.value,
                        1 if report.admin_created else 0,
                        1 if report.is_correction else 0,
                        report.processed_by,
                        report.processed_at,
                        attachments,
                        report.notes,
                    ),
                )
            return int(cur.lastrowid)

    def decide(
        self,
        *,
        report_id: int,
        status: ReportStatus,
        processed_by: int,
        processed_at: datetime,
        notes: Optional[str] = None,
        processor_response: Optional[str] = None,
    ) -> bool:
        # Conditional on pending so two concurrent decisions cannot both land.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_reports
                SET status=%s, processed_by=%s, processed_at=%s, notes=%s, processor_response=%s
                WHERE report_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(processed_by),
                    processed_at,
                    notes,
                    processor_response,
                    int(report_id),
                    ReportStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def set_response(self, *, report_id: int, processor_response: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_reports SET processor_response=%s WHERE report_id=%s",
                (processor_response, int(report_id)),
            )
            return cur.rowcount > 0

    def list(self, criteria: ReportFilter, *, limit: int) -> Sequence[ExceptionReport]:
        clauses, params = scope_clauses(
            RosterScope(grade=criteria.grade, class_no=criteria.class_no)
        )
        if criteria.report_date is not None:
            clauses.append("rp.report_date=%s")
            params.append(criteria.report_date)
        if criteria.start_date is not None:
            clauses.append("rp.report_date>=%s")
            params.append(criteria.start_date)
        if criteria.end_date is not None:
            clauses.append("rp.report_date<=%s")
            params.append(criteria.end_date)
        if criteria.report_type is not None:
            clauses.append("rp.report_type=%s")
            params.append(criteria.report_type.value)
        if criteria.status is not None:
            clauses.append("rp.status=%s")
            params.append(criteria.status.value)
        if criteria.student_id is not None:
            clauses.append("rp.student_id=%s")
            params.append(int(criteria.student_id))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_reports rp
                JOIN students st ON st.student_id = rp.student_id
                {where}
                ORDER BY rp.submitted_at DESC, rp.report_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_report(r) for r in fetchall(cur)]

    def list_approved_for_date(
        self,
        report_date: date,
        scope: Optional[RosterScope] = None,
    ) -> Sequence[ExceptionReport]:
        clauses, params = scope_clauses(scope)
        clauses[0:0] = ["rp.report_date=%s", "rp.status=%s"]
        params[0:0] = [report_date, ReportStatus.APPROVED.value]
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_reports rp
                JOIN students st ON st.student_id = rp.student_id
                WHERE {where}
                ORDER BY rp.report_id ASC
                """,
                tuple(params),
            )
            return [_to_report(r) for r in fetchall(cur)]
