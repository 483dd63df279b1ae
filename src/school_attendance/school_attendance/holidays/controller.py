from __future__ import annotations

from datetime import date

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_caller, json_body, login_required, ok, roles_required
from ..common.validators import optional_int
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def _parse_active(value) -> bool | None:
    if value is None or value == "":
        return True
    v = str(value).strip().lower()
    if v == "all":
        return None
    if v in ("1", "true", "yes"):
        return True
    if v in ("0", "false", "no"):
        return False
    raise ValidationError("is_active must be true, false or all")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/v1/holidays", methods=["GET"], endpoint="list_holidays")
    @login_required
    def list_holidays():
        year = optional_int(request.args.get("year"), "year") or date.today().year
        month = optional_int(request.args.get("month"), "month")
        items = container.holiday_service.list_holidays(
            year=year,
            month=month,
            kind=request.args.get("kind") or None,
            is_active=_parse_active(request.args.get("is_active")),
        )
        return ok(items, count=len(items))

    @app.route("/api/v1/holidays/check/<day>", methods=["GET"], endpoint="check_holiday")
    def check_holiday(day: str):
        return ok(container.holiday_service.is_holiday(parse_iso_date(day)))

    @app.route("/api/v1/holidays", methods=["POST"], endpoint="create_holiday")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def create_holiday():
        data = json_body()
        if not data.get("date") or not data.get("name"):
            raise ValidationError("date and name are required")

        holiday = container.holiday_service.create(
            holiday_date=parse_iso_date(str(data["date"])),
            name=str(data["name"]),
            kind=data.get("kind") or "school",
            created_by=current_caller().user_id,
        )
        return ok(holiday, message="Holiday registered", status=201)

    @app.route("/api/v1/holidays/<int:holiday_id>", methods=["PUT"], endpoint="update_holiday")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def update_holiday(holiday_id: int):
        data = json_body()
        is_active = data.get("is_active")
        holiday = container.holiday_service.update(
            holiday_id=holiday_id,
            name=data.get("name"),
            kind=data.get("kind"),
            is_active=bool(is_active) if is_active is not None else None,
        )
        return ok(holiday, message="Holiday updated")

    @app.route("/api/v1/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="delete_holiday")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def delete_holiday(holiday_id: int):
        holiday = container.holiday_service.delete(holiday_id)
        return ok(holiday, message="Holiday deleted")

    @app.route("/api/v1/holidays/weekends", methods=["POST"], endpoint="materialize_weekends")
    @roles_required(Role.ADMIN)
    def materialize_weekends():
        data = json_body()
        year = optional_int(data.get("year"), "year")
        month = optional_int(data.get("month"), "month")
        if year is None or month is None:
            raise ValidationError("year and month are required")

        created = container.holiday_service.materialize_weekends(
            year=year,
            month=month,
            created_by=current_caller().user_id,
        )
        return ok({"created": created}, message=f"{created} weekend days registered")
