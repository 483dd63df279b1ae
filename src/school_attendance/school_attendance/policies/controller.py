from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_body, login_required, ok, roles_required
from ..common.validators import optional_int
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .model import PolicyWindow


def register(app: Flask, container: Container) -> None:
    @app.route("/api/v1/attendance-settings", methods=["GET"], endpoint="get_attendance_settings")
    @login_required
    def get_attendance_settings():
        return ok(container.policy_service.get_active_policy())

    @app.route("/api/v1/attendance-settings", methods=["PUT"], endpoint="update_attendance_settings")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def update_attendance_settings():
        data = json_body()
        missing = [k for k in ("start_time", "late_time", "end_time") if not data.get(k)]
        if missing:
            raise ValidationError(f"Missing fields: {', '.join(missing)}")

        policy = container.policy_service.set_policy(
            PolicyWindow(data["start_time"], data["late_time"], data["end_time"]),
            created_by=current_caller().user_id,
        )
        return ok(policy, message="Attendance settings updated")

    @app.route("/api/v1/attendance-settings/reset", methods=["POST"], endpoint="reset_attendance_settings")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def reset_attendance_settings():
        policy = container.policy_service.reset_policy(created_by=current_caller().user_id)
        return ok(policy, message="Attendance settings reset to defaults")

    @app.route("/api/v1/attendance-settings/history", methods=["GET"], endpoint="attendance_settings_history")
    @roles_required(Role.ADMIN)
    def attendance_settings_history():
        page = optional_int(request.args.get("page"), "page") or 1
        limit = optional_int(request.args.get("limit"), "limit") or 10
        history = container.policy_service.list_history(page=page, limit=limit)
        return ok(
            history.items,
            pagination={
                "page": history.page,
                "limit": history.limit,
                "total": history.total,
                "total_pages": history.total_pages,
            },
        )
