from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .database.transaction import MySQLTransactionManager, TransactionManager
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayService
from .policies.mysql_policy_repository import MySQLPolicyRepository
from .policies.repository import PolicyRepository
from .policies.service import PolicyService
from .reconciliation.service import ReconciliationService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .roster.mysql_student_repository import MySQLStudentRepository
from .roster.repository import RosterRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    tx: TransactionManager

    roster_repo: RosterRepository
    policies_repo: PolicyRepository
    holidays_repo: HolidayRepository
    attendance_repo: AttendanceRepository
    reports_repo: ReportRepository

    policy_service: PolicyService
    holiday_service: HolidayService
    attendance_service: AttendanceService
    report_service: ReportService
    reconciliation_service: ReconciliationService


def assemble(
    *,
    tx: TransactionManager,
    roster_repo: RosterRepository,
    policies_repo: PolicyRepository,
    holidays_repo: HolidayRepository,
    attendance_repo: AttendanceRepository,
    reports_repo: ReportRepository,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over the given repositories (MySQL in production, fakes in tests)."""

    policy_service = PolicyService(policies_repo, tx)
    holiday_service = HolidayService(holidays_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        roster_repo,
        policy_service,
        holiday_service,
        strategy_factory=AttendanceStrategyFactory(),
    )
    report_service = ReportService(reports_repo, attendance_repo, roster_repo, policy_service, tx, clock=clock)
    reconciliation_service = ReconciliationService(roster_repo, attendance_repo, reports_repo, holiday_service, tx)

    return Container(
        conn=conn,
        tx=tx,
        roster_repo=roster_repo,
        policies_repo=policies_repo,
        holidays_repo=holidays_repo,
        attendance_repo=attendance_repo,
        reports_repo=reports_repo,
        policy_service=policy_service,
        holiday_service=holiday_service,
        attendance_service=attendance_service,
        report_service=report_service,
        reconciliation_service=reconciliation_service,
    )


def build_container(*, db_config: dict) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        pool_size=int(db_config.get("pool_size", 0)),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        conn=conn,
        tx=MySQLTransactionManager(conn),
        roster_repo=MySQLStudentRepository(conn),
        policies_repo=MySQLPolicyRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        reports_repo=MySQLReportRepository(conn),
    )
