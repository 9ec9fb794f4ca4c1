from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceAggregator, AttendanceRecorder
from .core.constants import DEFAULT_WRITE_WORKERS
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .imports.service import StudentImportService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLRosterRepository
from .users.repository import RosterRepository
from .users.service import AuthService, RosterService


@dataclass(frozen=True)
class Container:
    roster_repo: RosterRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository

    auth_service: AuthService
    roster_service: RosterService
    attendance_recorder: AttendanceRecorder
    attendance_aggregator: AttendanceAggregator
    report_service: ReportService
    import_service: StudentImportService
    leave_service: LeaveService
    dashboard_service: DashboardService


def build_services(
    *,
    roster_repo: RosterRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRepository,
    write_workers: int = DEFAULT_WRITE_WORKERS,
) -> Container:
    """Wire services over any set of repositories (MySQL or in-memory)."""

    roster_service = RosterService(roster_repo, max_workers=write_workers)
    aggregator = AttendanceAggregator(attendance_repo)
    leave_service = LeaveService(leaves_repo)

    return Container(
        roster_repo=roster_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        auth_service=AuthService(roster_repo),
        roster_service=roster_service,
        attendance_recorder=AttendanceRecorder(attendance_repo, roster_repo, max_workers=write_workers),
        attendance_aggregator=aggregator,
        report_service=ReportService(aggregator),
        import_service=StudentImportService(roster_service),
        leave_service=leave_service,
        dashboard_service=DashboardService(roster_service, aggregator, leave_service),
    )


def build_container(*, db_config: dict, write_workers: int = DEFAULT_WRITE_WORKERS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        roster_repo=MySQLRosterRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        write_workers=write_workers,
    )
