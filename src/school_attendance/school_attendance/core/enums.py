from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles as asserted by the upstream gateway."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


STAFF_ROLES = frozenset({Role.ADMIN, Role.TEACHER})


class AttendanceStatus(str, Enum):
    """Day outcome stored on an attendance record."""

    ON_TIME = "on_time"
    LATE = "late"
    ABSENT = "absent"


class ReportType(str, Enum):
    ABSENCE = "absence"
    LATE = "late"
    EARLY_LEAVE = "early_leave"
    SICK_LEAVE = "sick_leave"
    OFFICIAL_LEAVE = "official_leave"


class ReportStatus(str, Enum):
    """pending -> approved | rejected. Both outcomes are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReportAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class HolidayKind(str, Enum):
    NATIONAL = "national"
    SCHOOL = "school"
    WEEKEND = "weekend"


class HolidaySource(str, Enum):
    MANUAL = "manual"
    EXTERNAL_FEED = "external_feed"
    SYSTEM = "system"
