from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    DuplicateError,
    HolidayRejection,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..roster.model import RosterScope
from .datetime_utils import parse_iso_date
from .validators import optional_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    """Identity asserted by the authenticating gateway in front of this service."""

    user_id: int
    role: Role


def current_caller() -> Optional[Caller]:
    caller = getattr(g, "caller", None)
    if caller is not None:
        return caller

    user_id = request.headers.get("X-User-Id", "").strip()
    role = request.headers.get("X-User-Role", "").strip().lower()
    if not user_id.isdigit() or role not in {r.value for r in Role}:
        return None

    g.caller = Caller(user_id=int(user_id), role=Role(role))
    return g.caller


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_caller() is None:
            return fail("Authentication required", status=401, code="UNAUTHENTICATED")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            caller = current_caller()
            if caller is None:
                return fail("Authentication required", status=401, code="UNAUTHENTICATED")
            if caller.role not in allowed:
                return fail("You do not have permission for this action", status=403, code="FORBIDDEN")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def to_json(value: Any) -> Any:
    """Convert dataclasses/enums/dates produced by services into JSON-friendly values."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if hasattr(value, "__dataclass_fields__"):
        return {name: to_json(getattr(value, name)) for name in value.__dataclass_fields__}
    if isinstance(value, dict):
        return {str(k.value if isinstance(k, Enum) else k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value


def ok(data: Any = None, *, message: str | None = None, status: int = 200, **extra: Any):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_json(data)
    body.update({k: to_json(v) for k, v in extra.items()})
    return jsonify(body), status


def fail(message: str, *, status: int, code: str, **extra: Any):
    body: dict[str, Any] = {"success": False, "message": message, "code": code}
    body.update({k: to_json(v) for k, v in extra.items()})
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return {}
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return fail(str(e), status=400, code="VALIDATION")

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return fail(str(e), status=403, code="FORBIDDEN")

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return fail(str(e), status=404, code="NOT_FOUND")

    @app.errorhandler(DuplicateError)
    def _duplicate(e: DuplicateError):
        return fail(str(e), status=409, code="DUPLICATE")

    @app.errorhandler(InvalidStateError)
    def _invalid_state(e: InvalidStateError):
        return fail(str(e), status=409, code="INVALID_STATE")

    @app.errorhandler(HolidayRejection)
    def _holiday(e: HolidayRejection):
        return fail(str(e), status=422, code="HOLIDAY", holiday={"name": e.name, "kind": e.kind})

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return fail(str(e), status=400, code="DOMAIN")

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, status=int(e.code or 500), code="HTTP")

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail("A system error occurred while processing the request", status=500, code="SYSTEM_ERROR")


def query_date(name: str, default: Optional[date] = None) -> Optional[date]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return default
    return parse_iso_date(raw)


def query_scope() -> Optional[RosterScope]:
    grade = optional_int(request.args.get("grade"), "grade")
    class_no = optional_int(request.args.get("class"), "class")
    if grade is None and class_no is None:
        return None
    return RosterScope(grade=grade, class_no=class_no)
