from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_caller, json_body, ok, query_date, roles_required
from ..common.validators import optional_int, require_choice
from ..core.enums import ReportStatus, ReportType, Role
from ..core.exceptions import ValidationError
from ..container import Container
from .model import ReportFilter


def _report_fields(data: dict) -> dict:
    if not data.get("date") or not data.get("type"):
        raise ValidationError("date and type are required")
    return dict(
        report_date=parse_iso_date(str(data["date"])),
        report_type=data["type"],
        reason=str(data.get("reason") or ""),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/v1/attendance/reports", methods=["POST"], endpoint="submit_report")
    @roles_required(Role.STUDENT)
    def submit_report():
        data = json_body()
        attachments = data.get("attachments")
        if attachments is not None and not isinstance(attachments, list):
            raise ValidationError("attachments must be a list")

        report = container.report_service.submit(
            student_id=current_caller().user_id,
            attachments=attachments,
            **_report_fields(data),
        )
        return ok(report, message="Report submitted", status=201)

    @app.route("/api/v1/attendance/reports", methods=["GET"], endpoint="list_reports")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def list_reports():
        args = request.args
        criteria = ReportFilter(
            report_date=query_date("date"),
            start_date=query_date("start_date"),
            end_date=query_date("end_date"),
            report_type=require_choice(args["type"], ReportType, "report type") if args.get("type") else None,
            status=require_choice(args["status"], ReportStatus, "report status") if args.get("status") else None,
            grade=optional_int(args.get("grade"), "grade"),
            class_no=optional_int(args.get("class"), "class"),
            student_id=optional_int(args.get("student_id"), "student_id"),
        )
        reports = container.report_service.list_reports(criteria)
        return ok(reports, count=len(reports))

    @app.route("/api/v1/attendance/reports/my", methods=["GET"], endpoint="my_reports")
    @roles_required(Role.STUDENT)
    def my_reports():
        reports = container.report_service.list_for_student(current_caller().user_id)
        return ok(reports, count=len(reports))

    @app.route("/api/v1/attendance/reports/admin", methods=["POST"], endpoint="declare_report")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def declare_report():
        data = json_body()
        student_id = optional_int(data.get("student_id"), "student_id")
        if student_id is None:
            raise ValidationError("student_id is required")

        report = container.report_service.submit_as_admin(
            student_id=student_id,
            processor=current_caller().user_id,
            notes=data.get("notes"),
            **_report_fields(data),
        )
        return ok(report, message="Report registered", status=201)

    @app.route("/api/v1/attendance/reports/<int:report_id>/process", methods=["PUT"], endpoint="process_report")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def process_report(report_id: int):
        data = json_body()
        if not data.get("action"):
            raise ValidationError("action is required")

        report = container.report_service.process(
            report_id,
            data["action"],
            processor=current_caller().user_id,
            notes=data.get("notes"),
            response=data.get("response"),
        )
        return ok(report, message=f"Report {report.status.value}")

    @app.route("/api/v1/attendance/reports/<int:report_id>/response", methods=["PUT"], endpoint="respond_report")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def respond_report(report_id: int):
        data = json_body()
        report = container.report_service.respond(report_id, data.get("response"))
        return ok(report, message="Response saved")
