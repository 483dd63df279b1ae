from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, time, timedelta

import pytest

from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.container import assemble
from src.school_attendance.school_attendance.core.enums import ReportStatus
from src.school_attendance.school_attendance.core.exceptions import DuplicateError
from src.school_attendance.school_attendance.holidays.model import Holiday
from src.school_attendance.school_attendance.policies.model import AttendancePolicy
from src.school_attendance.school_attendance.reports.model import ExceptionReport
from src.school_attendance.school_attendance.roster.model import Student

# 2026-03-02 is a Monday, 2026-03-07 a Saturday.
SCHOOL_DAY = date(2026, 3, 2)
SATURDAY = date(2026, 3, 7)
FIXED_NOW = datetime(2026, 3, 2, 12, 0, 0)


def at(hh: int, mm: int, ss: int = 0, day: date = SCHOOL_DAY) -> datetime:
    return datetime.combine(day, time(hh, mm, ss))


class FakeRoster:
    def __init__(self, students):
        self._students = {s.student_id: s for s in students}

    def get_student(self, student_id):
        return self._students.get(int(student_id))

    def list_students(self, scope=None):
        items = [s for s in self._students.values() if scope is None or scope.matches(s)]
        return sorted(items, key=lambda s: s.sort_key)

    def in_scope(self, student_id, scope) -> bool:
        student = self._students.get(int(student_id))
        return student is not None and (scope is None or scope.matches(student))


class FakePolicyRepo:
    def __init__(self):
        self._lock = threading.Lock()
        self._rows: dict[int, AttendancePolicy] = {}
        self._next_id = 1

    def save(self):
        return (dict(self._rows), self._next_id)

    def restore(self, state):
        self._rows, self._next_id = dict(state[0]), state[1]

    def get_active(self):
        active = [p for p in self._rows.values() if p.is_active]
        active.sort(key=lambda p: (p.created_at, p.policy_id), reverse=True)
        return active[0] if active else None

    def get_by_id(self, policy_id):
        return self._rows.get(int(policy_id))

    def deactivate_active(self):
        changed = 0
        for pid, p in list(self._rows.items()):
            if p.is_active:
                self._rows[pid] = replace(p, is_active=False)
                changed += 1
        return changed

    def insert_active(self, *, start_time, late_time, end_time, created_by):
        with self._lock:
            if any(p.is_active for p in self._rows.values()):
                raise DuplicateError("Another attendance policy is already active")
            pid = self._next_id
            self._next_id += 1
            self._rows[pid] = AttendancePolicy(
                policy_id=pid,
                start_time=start_time,
                late_time=late_time,
                end_time=end_time,
                is_active=True,
                created_at=datetime(2026, 1, 1) + timedelta(minutes=pid),
                created_by=created_by,
            )
            return pid

    def list_history(self, *, limit, offset):
        rows = sorted(self._rows.values(), key=lambda p: (p.created_at, p.policy_id), reverse=True)
        return rows[offset : offset + limit]

    def count(self):
        return len(self._rows)


class FakeHolidayRepo:
    def __init__(self):
        self._rows: dict[int, Holiday] = {}
        self._next_id = 1

    def save(self):
        return (dict(self._rows), self._next_id)

    def restore(self, state):
        self._rows, self._next_id = dict(state[0]), state[1]

    def get_active_for_date(self, holiday_date):
        return next((h for h in self._rows.values() if h.holiday_date == holiday_date and h.is_active), None)

    def get_by_id(self, holiday_id):
        return self._rows.get(int(holiday_id))

    def get_by_date(self, holiday_date):
        return next((h for h in self._rows.values() if h.holiday_date == holiday_date), None)

    def create(self, *, holiday_date, name, kind, source, created_by):
        if self.get_by_date(holiday_date) is not None:
            raise DuplicateError(f"A holiday is already registered on {holiday_date:%Y-%m-%d}")
        hid = self._next_id
        self._next_id += 1
        self._rows[hid] = Holiday(
            holiday_id=hid,
            holiday_date=holiday_date,
            name=name,
            kind=kind,
            source=source,
            created_by=created_by,
            created_at=FIXED_NOW,
        )
        return hid

    def update(self, *, holiday_id, name=None, kind=None, is_active=None):
        h = self._rows.get(int(holiday_id))
        if h is None:
            return False
        self._rows[h.holiday_id] = replace(
            h,
            name=name if name is not None else h.name,
            kind=kind if kind is not None else h.kind,
            is_active=is_active if is_active is not None else h.is_active,
        )
        return True

    def delete(self, holiday_id):
        return self._rows.pop(int(holiday_id), None) is not None

    def list_range(self, *, start, end, kind=None, is_active=True):
        items = [
            h
            for h in self._rows.values()
            if start <= h.holiday_date <= end
            and (kind is None or h.kind == kind)
            and (is_active is None or h.is_active == is_active)
        ]
        return sorted(items, key=lambda h: h.holiday_date)


class FakeAttendanceRepo:
    def __init__(self, roster: FakeRoster):
        self._roster = roster
        self._lock = threading.Lock()
        self._rows: dict[int, AttendanceRecord] = {}
        self._next_id = 1
        self.create_calls = 0

    def save(self):
        return (dict(self._rows), self._next_id)

    def restore(self, state):
        self._rows, self._next_id = dict(state[0]), state[1]

    def get_by_id(self, attendance_id):
        return self._rows.get(int(attendance_id))

    def get_for_student_and_date(self, student_id, attendance_date):
        return next(
            (r for r in self._rows.values() if r.student_id == int(student_id) and r.attendance_date == attendance_date),
            None,
        )

    def create_checkin(self, *, student_id, attendance_date, check_in_time, status):
        with self._lock:
            self.create_calls += 1
            if self._find(student_id, attendance_date) is not None:
                raise DuplicateError("Attendance has already been recorded for this student today")
            return self._insert(student_id, attendance_date, check_in_time, status)

    def upsert(self, *, student_id, attendance_date, check_in_time, status):
        with self._lock:
            existing = self._find(student_id, attendance_date)
            if existing is None:
                return self._insert(student_id, attendance_date, check_in_time, status)
            self._rows[existing.attendance_id] = replace(
                existing,
                check_in_time=check_in_time,
                status=status,
                updated_at=FIXED_NOW,
            )
            return existing.attendance_id

    def _find(self, student_id, attendance_date):
        # Unique key on (student, date); independent of the public lookup so tests can stub that.
        return next(
            (r for r in self._rows.values() if r.student_id == int(student_id) and r.attendance_date == attendance_date),
            None,
        )

    def _insert(self, student_id, attendance_date, check_in_time, status):
        aid = self._next_id
        self._next_id += 1
        self._rows[aid] = AttendanceRecord(
            attendance_id=aid,
            student_id=int(student_id),
            attendance_date=attendance_date,
            check_in_time=check_in_time,
            status=status,
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
        )
        return aid

    def list_for_date(self, attendance_date, scope=None):
        return [
            r
            for r in self._rows.values()
            if r.attendance_date == attendance_date and self._roster.in_scope(r.student_id, scope)
        ]

    def list_for_student(self, student_id, *, start, end):
        items = [r for r in self._rows.values() if r.student_id == int(student_id) and start <= r.attendance_date <= end]
        return sorted(items, key=lambda r: r.attendance_date, reverse=True)

    def count_by_status(self, *, start, end, scope=None):
        counts = {}
        for r in self._rows.values():
            if start <= r.attendance_date <= end and self._roster.in_scope(r.student_id, scope):
                counts[r.status] = counts.get(r.status, 0) + 1
        return counts


class FakeReportRepo:
    def __init__(self, roster: FakeRoster):
        self._roster = roster
        self._lock = threading.Lock()
        self._rows: dict[int, ExceptionReport] = {}
        self._next_id = 1

    def save(self):
        return (dict(self._rows), self._next_id)

    def restore(self, state):
        self._rows, self._next_id = dict(state[0]), state[1]

    def all(self):
        return [self._rows[k] for k in sorted(self._rows)]

    def get_by_id(self, report_id):
        return self._rows.get(int(report_id))

    def find(self, *, student_id, report_date, report_type):
        matches = [
            r
            for r in self.all()
            if r.student_id == int(student_id) and r.report_date == report_date and r.report_type == report_type
        ]
        matches.sort(key=lambda r: (r.is_correction, r.report_id))
        return matches[0] if matches else None

    def create(self, report):
        with self._lock:
            if not report.is_correction:
                for r in self._rows.values():
                    if (
                        not r.is_correction
                        and r.student_id == report.student_id
                        and r.report_date == report.report_date
                        and r.report_type == report.report_type
                    ):
                        raise DuplicateError("A report of this type already exists for this student and date")
            rid = self._next_id
            self._next_id += 1
            self._rows[rid] = ExceptionReport(
                report_id=rid,
                student_id=report.student_id,
                report_date=report.report_date,
                report_type=report.report_type,
                reason=report.reason,
                status=report.status,
                submitted_at=FIXED_NOW + timedelta(seconds=rid),
                processed_at=report.processed_at,
                processed_by=report.processed_by,
                admin_created=report.admin_created,
                is_correction=report.is_correction,
                attachments=list(report.attachments) if report.attachments else None,
                notes=report.notes,
            )
            return rid

    def decide(self, *, report_id, status, processed_by, processed_at, notes=None, processor_response=None):
        with self._lock:
            r = self._rows.get(int(report_id))
            if r is None or r.status != ReportStatus.PENDING:
                return False
            self._rows[r.report_id] = replace(
                r,
                status=status,
                processed_by=processed_by,
                processed_at=processed_at,
                notes=notes,
                processor_response=processor_response,
            )
            return True

    def set_response(self, *, report_id, processor_response):
        r = self._rows.get(int(report_id))
        if r is None:
            return False
        self._rows[r.report_id] = replace(r, processor_response=processor_response)
        return True

    def list(self, criteria, *, limit):
        def keep(r):
            student = self._roster.get_student(r.student_id)
            return (
                (criteria.report_date is None or r.report_date == criteria.report_date)
                and (criteria.start_date is None or r.report_date >= criteria.start_date)
                and (criteria.end_date is None or r.report_date <= criteria.end_date)
                and (criteria.report_type is None or r.report_type == criteria.report_type)
                and (criteria.status is None or r.status == criteria.status)
                and (criteria.student_id is None or r.student_id == criteria.student_id)
                and (criteria.grade is None or (student is not None and student.grade == criteria.grade))
                and (criteria.class_no is None or (student is not None and student.class_no == criteria.class_no))
            )

        items = [r for r in self._rows.values() if keep(r)]
        items.sort(key=lambda r: (r.submitted_at, r.report_id), reverse=True)
        return items[:limit]

    def list_approved_for_date(self, report_date, scope=None):
        return [
            r
            for r in self.all()
            if r.report_date == report_date
            and r.status == ReportStatus.APPROVED
            and self._roster.in_scope(r.student_id, scope)
        ]


class FakeTransactionManager:
    """Restores every registered fake on an exception inside atomic()."""

    def __init__(self, *repos):
        self._repos = repos
        self._local = threading.local()
        self.commits = 0
        self.rollbacks = 0
        self.snapshots = 0

    @contextmanager
    def atomic(self):
        if getattr(self._local, "depth", 0):
            yield
            return

        saved = [r.save() for r in self._repos]
        self._local.depth = 1
        try:
            yield
            self.commits += 1
        except BaseException:
            for repo, state in zip(self._repos, saved):
                repo.restore(state)
            self.rollbacks += 1
            raise
        finally:
            self._local.depth = 0

    @contextmanager
    def snapshot(self):
        self.snapshots += 1
        yield


def make_students():
    return [
        Student(student_id=1, name="Kim Minjun", student_number="10101", grade=1, class_no=1, number=1),
        Student(student_id=2, name="Lee Seoyeon", student_number="10102", grade=1, class_no=1, number=2),
        Student(student_id=3, name="Park Jiho", student_number="10201", grade=1, class_no=2, number=1),
        Student(student_id=4, name="Choi Yuna", student_number="20101", grade=2, class_no=1, number=1),
    ]


@pytest.fixture()
def fixed_now():
    return FIXED_NOW


@pytest.fixture()
def container(fixed_now):
    roster = FakeRoster(make_students())
    policies = FakePolicyRepo()
    holidays = FakeHolidayRepo()
    attendance = FakeAttendanceRepo(roster)
    reports = FakeReportRepo(roster)
    tx = FakeTransactionManager(policies, holidays, attendance, reports)

    return assemble(
        tx=tx,
        roster_repo=roster,
        policies_repo=policies,
        holidays_repo=holidays,
        attendance_repo=attendance,
        reports_repo=reports,
        clock=lambda: fixed_now,
    )
