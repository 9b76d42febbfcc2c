from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ClassSession
from .repository import SessionRepository

_COLUMNS = """
    session_id, course_id, section_id, session_name, session_date,
    start_time, end_time, timezone, status, location, capacity
"""


def _to_session(r: dict) -> ClassSession:
    return ClassSession(
        session_id=str(r["session_id"]),
        course_id=str(r["course_id"]),
        section_id=r.get("section_id"),
        name=r["session_name"],
        session_date=r["session_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        timezone=r.get("timezone") or "UTC",
        status=SessionStatus(r["status"]),
        location=r.get("location"),
        capacity=int(r["capacity"]) if r.get("capacity") is not None else None,
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: str) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (session_id,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def create(self, session: ClassSession) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(
                    session_id, course_id, section_id, session_name, session_date,
                    start_time, end_time, timezone, status, location, capacity
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    session.session_id,
                    session.course_id,
                    session.section_id,
                    session.name,
                    session.session_date,
                    session.start_time,
                    session.end_time,
                    session.timezone,
                    session.status.value,
                    session.location,
                    session.capacity,
                ),
            )

    def update_schedule(self, session: ClassSession) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET session_name=%s, session_date=%s, start_time=%s, end_time=%s,
                    timezone=%s, location=%s, capacity=%s
                WHERE session_id=%s
                """,
                (
                    session.name,
                    session.session_date,
                    session.start_time,
                    session.end_time,
                    session.timezone,
                    session.location,
                    session.capacity,
                    session.session_id,
                ),
            )
            return cur.rowcount > 0

    def set_status(self, session_id: str, status: SessionStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_sessions SET status=%s WHERE session_id=%s",
                (status.value, session_id),
            )
            return cur.rowcount > 0

    def list_for_section_and_date(self, section_id: str, session_date: date) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE section_id=%s AND session_date=%s
                ORDER BY start_time
                """,
                (section_id, session_date),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_for_course(self, course_id: str) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE course_id=%s
                ORDER BY session_date DESC, start_time DESC
                """,
                (course_id,),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_open(self) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE status IN ('scheduled', 'active')
                ORDER BY session_date, start_time
                """
            )
            return [_to_session(r) for r in fetchall(cur)]
