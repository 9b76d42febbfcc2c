from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from ..core.enums import AttendanceMethod, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _to_record(r: dict) -> AttendanceRecord:
    marked_at = r["marked_at"]
    # DATETIME columns hold UTC and come back naive.
    if marked_at is not None and marked_at.tzinfo is None:
        marked_at = marked_at.replace(tzinfo=timezone.utc)
    return AttendanceRecord(
        record_id=str(r["record_id"]),
        session_id=str(r["session_id"]),
        student_id=str(r["student_id"]),
        status=AttendanceStatus(r["status"]),
        marked_at=marked_at,
        method=AttendanceMethod(r["method_used"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def has_record(self, session_id: str, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM attendance_records WHERE session_id=%s AND student_id=%s LIMIT 1",
                (session_id, student_id),
            )
            return fetchone(cur) is not None

    def get_for_session_and_student(self, session_id: str, student_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id, session_id, student_id, status, marked_at, method_used
                FROM attendance_records
                WHERE session_id=%s AND student_id=%s
                """,
                (session_id, student_id),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert(
        self,
        *,
        record_id: str,
        session_id: str,
        student_id: str,
        status: AttendanceStatus,
        marked_at: datetime,
        method: AttendanceMethod,
    ) -> AttendanceRecord:
        # uq_records_session_student turns a lost race into ER_DUP_ENTRY -> DuplicateRecordError.
        stored_at = marked_at.astimezone(timezone.utc).replace(tzinfo=None) if marked_at.tzinfo else marked_at
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(record_id, session_id, student_id, status, marked_at, method_used)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (record_id, session_id, student_id, status.value, stored_at, method.value),
            )
        return AttendanceRecord(
            record_id=record_id,
            session_id=session_id,
            student_id=student_id,
            status=status,
            marked_at=marked_at,
            method=method,
        )

    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id, session_id, student_id, status, marked_at, method_used
                FROM attendance_records
                WHERE session_id=%s
                ORDER BY marked_at
                """,
                (session_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT record_id, session_id, student_id, status, marked_at, method_used
                FROM attendance_records
                WHERE student_id=%s
                ORDER BY marked_at DESC
                LIMIT %s
                """,
                (student_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_session(self, session_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records WHERE session_id=%s", (session_id,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
