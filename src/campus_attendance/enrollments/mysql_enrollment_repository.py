from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import EnrollmentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Enrollment
from .repository import EnrollmentRepository


def _to_enrollment(r: dict) -> Enrollment:
    return Enrollment(
        enrollment_id=str(r["enrollment_id"]),
        student_id=str(r["student_id"]),
        section_id=str(r["section_id"]),
        status=EnrollmentStatus(r["status"]),
        enrollment_date=r["enrollment_date"],
    )


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, enrollment_id: str) -> Optional[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT enrollment_id, student_id, section_id, status, enrollment_date
                FROM section_enrollments
                WHERE enrollment_id=%s
                """,
                (enrollment_id,),
            )
            r = fetchone(cur)
            return _to_enrollment(r) if r else None

    def list_for_student_and_section(self, student_id: str, section_id: str) -> Sequence[Enrollment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT enrollment_id, student_id, section_id, status, enrollment_date
                FROM section_enrollments
                WHERE student_id=%s AND section_id=%s
                """,
                (student_id, section_id),
            )
            return [_to_enrollment(r) for r in fetchall(cur)]

    def list_for_section(self, section_id: str, *, status: Optional[EnrollmentStatus] = None) -> Sequence[Enrollment]:
        clauses = ["section_id=%s"]
        params: list[object] = [section_id]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT enrollment_id, student_id, section_id, status, enrollment_date
                FROM section_enrollments
                WHERE {" AND ".join(clauses)}
                ORDER BY enrollment_date, student_id
                """,
                tuple(params),
            )
            return [_to_enrollment(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        enrollment_id: str,
        student_id: str,
        section_id: str,
        enrollment_date: date,
        status: EnrollmentStatus,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO section_enrollments(enrollment_id, student_id, section_id, enrollment_date, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (enrollment_id, student_id, section_id, enrollment_date, status.value),
            )

    def update_status(self, enrollment_id: str, status: EnrollmentStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE section_enrollments SET status=%s WHERE enrollment_id=%s",
                (status.value, enrollment_id),
            )
            return cur.rowcount > 0
