from __future__ import annotations

from datetime import date

from src.school_attendance.school_attendance.core.enums import AttendanceStatus, Role
from src.school_attendance.school_attendance.roster.model import RosterScope

from tests.conftest import SATURDAY, SCHOOL_DAY, at


def _approve(container, student_id, report_type):
    report = container.report_service.submit(
        student_id=student_id,
        report_date=SCHOOL_DAY,
        report_type=report_type,
        reason="Explained",
    )
    return container.report_service.process(report.report_id, "approve", processor=7)


def _summary(entries):
    return [(e.student.student_id, e.status) for e in entries]


def test_everyone_missing_is_absent_in_roster_order(container):
    entries = container.reconciliation_service.unresolved(SCHOOL_DAY)

    assert _summary(entries) == [
        (1, AttendanceStatus.ABSENT),
        (2, AttendanceStatus.ABSENT),
        (3, AttendanceStatus.ABSENT),
        (4, AttendanceStatus.ABSENT),
    ]
    assert all(e.record is None for e in entries)
    assert container.tx.snapshots == 1


def test_on_time_students_are_resolved_and_late_ones_are_listed(container):
    container.attendance_service.record_check_in(1, at(7, 50))
    late = container.attendance_service.record_check_in(2, at(8, 15)).record

    entries = container.reconciliation_service.unresolved(SCHOOL_DAY, RosterScope(grade=1, class_no=1))

    assert _summary(entries) == [(2, AttendanceStatus.LATE)]
    assert entries[0].record == late


def test_approved_late_report_covers_late_arrival(container):
    container.attendance_service.record_check_in(2, at(8, 15))
    _approve(container, 2, "late")

    entries = container.reconciliation_service.unresolved(SCHOOL_DAY, RosterScope(grade=1, class_no=1))

    assert 2 not in [e.student.student_id for e in entries]


def test_official_leave_does_not_cover_late_arrival(container):
    container.attendance_service.record_check_in(2, at(8, 15))
    _approve(container, 2, "official_leave")

    entries = container.reconciliation_service.unresolved(SCHOOL_DAY, RosterScope(grade=1, class_no=1))

    assert (2, AttendanceStatus.LATE) in _summary(entries)
    assert container.attendance_service.get_record(2, SCHOOL_DAY).status == AttendanceStatus.LATE


def test_any_approved_report_settles_a_student_without_record(container):
    _approve(container, 1, "sick_leave")

    entries = container.reconciliation_service.unresolved(SCHOOL_DAY, RosterScope(grade=1, class_no=1))

    assert _summary(entries) == [(2, AttendanceStatus.ABSENT)]


def test_pending_or_rejected_reports_do_not_settle(container):
    pending = container.report_service.submit(
        student_id=1, report_date=SCHOOL_DAY, report_type="sick_leave", reason="Cold"
    )
    rejected = container.report_service.submit(
        student_id=2, report_date=SCHOOL_DAY, report_type="sick_leave", reason="Cold"
    )
    container.report_service.process(rejected.report_id, "reject", processor=7)

    entries = container.reconciliation_service.unresolved(SCHOOL_DAY, RosterScope(grade=1, class_no=1))

    assert pending.status.value == "pending"
    assert [e.student.student_id for e in entries] == [1, 2]


def test_approved_absence_and_corrections_settle_the_day(container):
    _approve(container, 1, "absence")
    container.report_service.correct(
        student_id=2,
        attendance_date=SCHOOL_DAY,
        new_status="on_time",
        processor=7,
        processor_role=Role.ADMIN,
    )

    assert container.reconciliation_service.unresolved(SCHOOL_DAY, RosterScope(grade=1, class_no=1)) == []


def test_correction_to_late_is_covered_by_its_audit_report(container):
    container.report_service.correct(
        student_id=1,
        attendance_date=SCHOOL_DAY,
        new_status="late",
        processor=7,
        processor_role=Role.ADMIN,
    )

    entries = container.reconciliation_service.unresolved(SCHOOL_DAY, RosterScope(grade=1, class_no=1))

    # The correction audit report is of type late and approved, so it covers the arrival.
    assert _summary(entries) == [(2, AttendanceStatus.ABSENT)]


def test_holiday_has_nothing_to_reconcile(container):
    assert container.reconciliation_service.unresolved(SATURDAY) == []

    container.holiday_service.create(holiday_date=SCHOOL_DAY, name="Exam break", kind="school", created_by=1)
    assert container.reconciliation_service.unresolved(SCHOOL_DAY) == []


def test_scope_limits_roster_records_and_reports(container):
    container.attendance_service.record_check_in(4, at(8, 30))

    entries = container.reconciliation_service.unresolved(SCHOOL_DAY, RosterScope(grade=2))

    assert _summary(entries) == [(4, AttendanceStatus.LATE)]


def test_day_view_lists_everyone_with_summary(container):
    container.attendance_service.record_check_in(1, at(7, 50))
    container.attendance_service.record_check_in(2, at(8, 15))

    view = container.reconciliation_service.day_view(SCHOOL_DAY, RosterScope(grade=1))

    assert [(e.student.student_id, e.status, e.has_record) for e in view.entries] == [
        (1, AttendanceStatus.ON_TIME, True),
        (2, AttendanceStatus.LATE, True),
        (3, AttendanceStatus.ABSENT, False),
    ]
    assert view.summary == {
        AttendanceStatus.ON_TIME: 1,
        AttendanceStatus.LATE: 1,
        AttendanceStatus.ABSENT: 1,
    }

    lates = container.reconciliation_service.day_view(SCHOOL_DAY, status="late")
    assert [e.student.student_id for e in lates.entries] == [2]
    assert lates.total == 1


def test_monthly_stats_counts_stored_records(container):
    container.attendance_service.record_check_in(1, at(7, 50))
    container.attendance_service.record_check_in(2, at(8, 15))
    container.attendance_service.record_check_in(1, at(8, 15, day=date(2026, 3, 3)))
    container.attendance_service.record_check_in(1, at(7, 15, day=date(2026, 4, 1)))

    stats = container.reconciliation_service.monthly_stats(year=2026, month=3)

    assert stats == {
        AttendanceStatus.ON_TIME: 1,
        AttendanceStatus.LATE: 2,
        AttendanceStatus.ABSENT: 0,
    }
