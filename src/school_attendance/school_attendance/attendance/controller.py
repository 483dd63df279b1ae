from __future__ import annotations

from datetime import date

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date, parse_iso_datetime
from ..common.http import (
    current_caller,
    fail,
    json_body,
    login_required,
    ok,
    query_date,
    query_scope,
    roles_required,
)
from ..common.validators import optional_int
from ..core.enums import Role
from ..core.exceptions import DuplicateError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/v1/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_check_in():
        data = json_body()
        student_id = optional_int(data.get("student_id"), "student_id")
        if student_id is None:
            raise ValidationError("student_id is required")

        # Readers buffer events while offline; classify by when the tap happened.
        raw_ts = data.get("timestamp")
        event_time = parse_iso_datetime(raw_ts) if raw_ts not in (None, "") else now_local()

        try:
            result = container.attendance_service.record_check_in(student_id, event_time)
        except DuplicateError as e:
            # Repeated taps at the reader are expected; answer informationally.
            return fail(str(e), status=200, code="ALREADY_CHECKED_IN")

        return ok(result.record, message=f"Check-in recorded ({result.status.value})", status=201)

    @app.route("/api/v1/attendance/records", methods=["GET"], endpoint="attendance_records")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_records():
        day = query_date("date", date.today())
        view = container.reconciliation_service.day_view(
            day,
            query_scope(),
            status=request.args.get("status") or None,
        )
        return ok(view.entries, date=day, summary=view.summary, total=view.total)

    @app.route("/api/v1/attendance/records/my", methods=["GET"], endpoint="my_attendance_records")
    @roles_required(Role.STUDENT)
    def my_attendance_records():
        records = container.attendance_service.list_for_student(
            current_caller().user_id,
            start=query_date("start_date"),
            end=query_date("end_date"),
        )
        return ok(records, count=len(records))

    @app.route("/api/v1/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def attendance_stats():
        today = date.today()
        year = optional_int(request.args.get("year"), "year") or today.year
        month = optional_int(request.args.get("month"), "month") or today.month
        stats = container.reconciliation_service.monthly_stats(year=year, month=month, scope=query_scope())
        return ok(stats, year=year, month=month)

    @app.route("/api/v1/attendance/unprocessed", methods=["GET"], endpoint="attendance_unprocessed")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_unprocessed():
        day = query_date("date", date.today())
        entries = container.reconciliation_service.unresolved(day, query_scope())
        return ok(entries, date=day, count=len(entries))

    @app.route("/api/v1/attendance/correct/<int:student_id>", methods=["PUT"], endpoint="attendance_correct")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def attendance_correct(student_id: int):
        data = json_body()
        if not data.get("date") or not data.get("status"):
            raise ValidationError("date and status are required")

        caller = current_caller()
        record = container.report_service.correct(
            student_id=student_id,
            attendance_date=parse_iso_date(str(data["date"])),
            new_status=data["status"],
            processor=caller.user_id,
            processor_role=caller.role,
            reason=data.get("reason"),
        )
        return ok(record, message="Attendance corrected")
