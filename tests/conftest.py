from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import Optional

import pytest

from campus_attendance.attendance.model import AttendanceRecord
from campus_attendance.container import assemble_container
from campus_attendance.core.enums import EnrollmentStatus, SessionStatus
from campus_attendance.core.exceptions import DuplicateRecordError
from campus_attendance.enrollments.model import Enrollment
from campus_attendance.sessions.model import ClassSession

SESSION_ID = "sess-1"
SECTION_ID = "SEC-A"
COURSE_ID = "CS101"
STUDENT_ID = "stu-1"


class InMemorySessions:
    def __init__(self):
        self.by_id: dict[str, ClassSession] = {}

    def add(self, session: ClassSession) -> ClassSession:
        self.by_id[session.session_id] = session
        return session

    def get_by_id(self, session_id: str) -> Optional[ClassSession]:
        return self.by_id.get(session_id)

    def create(self, session: ClassSession) -> None:
        if session.session_id in self.by_id:
            raise DuplicateRecordError("duplicate session")
        self.by_id[session.session_id] = session

    def update_schedule(self, session: ClassSession) -> bool:
        if session.session_id not in self.by_id:
            return False
        self.by_id[session.session_id] = session
        return True

    def set_status(self, session_id: str, status: SessionStatus) -> bool:
        current = self.by_id.get(session_id)
        if not current:
            return False
        self.by_id[session_id] = replace(current, status=status)
        return True

    def list_for_section_and_date(self, section_id: str, session_date: date):
        return [s for s in self.by_id.values() if s.section_id == section_id and s.session_date == session_date]

    def list_for_course(self, course_id: str):
        return [s for s in self.by_id.values() if s.course_id == course_id]

    def list_open(self):
        return [s for s in self.by_id.values() if s.is_open]


class InMemoryEnrollments:
    def __init__(self):
        self.by_id: dict[str, Enrollment] = {}

    def add(self, student_id: str, section_id: str, status: EnrollmentStatus = EnrollmentStatus.ACTIVE) -> Enrollment:
        e = Enrollment(
            enrollment_id=f"enr-{len(self.by_id) + 1}",
            student_id=student_id,
            section_id=section_id,
            status=status,
            enrollment_date=date(2024, 2, 1),
        )
        self.by_id[e.enrollment_id] = e
        return e

    def get_by_id(self, enrollment_id: str) -> Optional[Enrollment]:
        return self.by_id.get(enrollment_id)

    def list_for_student_and_section(self, student_id: str, section_id: str):
        return [e for e in self.by_id.values() if e.student_id == student_id and e.section_id == section_id]

    def list_for_section(self, section_id: str, *, status=None):
        return [
            e for e in self.by_id.values() if e.section_id == section_id and (status is None or e.status == status)
        ]

    def create(self, *, enrollment_id, student_id, section_id, enrollment_date, status) -> None:
        if self.list_for_student_and_section(student_id, section_id):
            raise DuplicateRecordError("duplicate enrollment")
        self.by_id[enrollment_id] = Enrollment(
            enrollment_id=enrollment_id,
            student_id=student_id,
            section_id=section_id,
            status=status,
            enrollment_date=enrollment_date,
        )

    def update_status(self, enrollment_id: str, status: EnrollmentStatus) -> bool:
        current = self.by_id.get(enrollment_id)
        if not current:
            return False
        self.by_id[enrollment_id] = replace(current, status=status)
        return True


class InMemoryAttendance:
    """Insert enforces the (session_id, student_id) unique key like the real table."""

    def __init__(self):
        self.records: dict[tuple[str, str], AttendanceRecord] = {}

    def has_record(self, session_id: str, student_id: str) -> bool:
        return (session_id, student_id) in self.records

    def get_for_session_and_student(self, session_id: str, student_id: str):
        return self.records.get((session_id, student_id))

    def insert(self, *, record_id, session_id, student_id, status, marked_at, method) -> AttendanceRecord:
        key = (session_id, student_id)
        if key in self.records:
            raise DuplicateRecordError("Duplicate entry for key 'uq_attendance_session_student'")
        rec = AttendanceRecord(
            record_id=record_id,
            session_id=session_id,
            student_id=student_id,
            status=status,
            marked_at=marked_at,
            method=method,
        )
        self.records[key] = rec
        return rec

    def list_for_session(self, session_id: str):
        return [r for r in self.records.values() if r.session_id == session_id]

    def list_for_student(self, student_id: str, limit: int):
        items = [r for r in self.records.values() if r.student_id == student_id]
        items.sort(key=lambda r: r.marked_at, reverse=True)
        return items[:limit]

    def count_for_session(self, session_id: str) -> int:
        return len(self.list_for_session(session_id))


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def sessions_repo():
    return InMemorySessions()


@pytest.fixture
def enrollments_repo():
    return InMemoryEnrollments()


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def demo_session(sessions_repo):
    """2024-03-01 09:00-11:00 UTC for section SEC-A, with one active enrollee."""

    return sessions_repo.add(
        ClassSession(
            session_id=SESSION_ID,
            course_id=COURSE_ID,
            section_id=SECTION_ID,
            name="Lecture 1",
            session_date=date(2024, 3, 1),
            start_time=time(9, 0),
            end_time=time(11, 0),
        )
    )


@pytest.fixture
def enrolled_student(enrollments_repo):
    return enrollments_repo.add(STUDENT_ID, SECTION_ID)


@pytest.fixture
def container(sessions_repo, enrollments_repo, attendance_repo):
    return assemble_container(
        sessions_repo=sessions_repo,
        enrollments_repo=enrollments_repo,
        attendance_repo=attendance_repo,
    )


@pytest.fixture
def frozen_now(monkeypatch):
    """Pin the service clock to 2024-03-01 09:12 UTC."""

    now = utc(2024, 3, 1, 9, 12)
    monkeypatch.setattr("campus_attendance.attendance.service.now_utc", lambda: now)
    monkeypatch.setattr("campus_attendance.sessions.service.now_utc", lambda: now)
    return now


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from campus_attendance.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(user_id: str, role: str) -> None:
        with client.session_transaction() as sess:
            sess["user_id"] = user_id
            sess["role"] = role

    return _login
