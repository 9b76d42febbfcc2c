from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AdmissionCheckFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_TIMEZONE, DEFAULT_TOKEN_MAX_AGE_SECONDS, DEFAULT_TOKEN_MAX_FUTURE_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollments.repository import EnrollmentRepository
from .enrollments.service import EnrollmentService
from .reports.service import AttendanceReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    sessions_repo: SessionRepository
    enrollments_repo: EnrollmentRepository
    attendance_repo: AttendanceRepository

    session_service: SessionService
    enrollment_service: EnrollmentService
    attendance_service: AttendanceService
    report_service: AttendanceReportService


def assemble_container(
    *,
    sessions_repo: SessionRepository,
    enrollments_repo: EnrollmentRepository,
    attendance_repo: AttendanceRepository,
    token_max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS,
    token_max_future_seconds: int = DEFAULT_TOKEN_MAX_FUTURE_SECONDS,
    default_timezone: str = DEFAULT_TIMEZONE,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    checks = AdmissionCheckFactory(
        sessions=sessions_repo,
        enrollments=enrollments_repo,
        attendance=attendance_repo,
        token_max_age_seconds=token_max_age_seconds,
        token_max_future_seconds=token_max_future_seconds,
    )

    return Container(
        conn=conn,
        sessions_repo=sessions_repo,
        enrollments_repo=enrollments_repo,
        attendance_repo=attendance_repo,
        session_service=SessionService(
            sessions_repo,
            enrollments_repo,
            attendance_repo,
            default_timezone=default_timezone,
        ),
        enrollment_service=EnrollmentService(enrollments_repo),
        attendance_service=AttendanceService(attendance_repo, checks),
        report_service=AttendanceReportService(sessions_repo, enrollments_repo, attendance_repo),
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        sessions_repo=MySQLSessionRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        token_max_age_seconds=int(getattr(settings, "TOKEN_MAX_AGE_SECONDS", DEFAULT_TOKEN_MAX_AGE_SECONDS)),
        token_max_future_seconds=int(getattr(settings, "TOKEN_MAX_FUTURE_SECONDS", DEFAULT_TOKEN_MAX_FUTURE_SECONDS)),
        default_timezone=str(getattr(settings, "DEFAULT_TIMEZONE", DEFAULT_TIMEZONE)),
        conn=conn,
    )
