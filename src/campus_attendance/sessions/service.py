from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..attendance.token import encode_token, issued_minute
from ..common.datetime_utils import ensure_aware, get_zone, now_utc, time_status
from ..common.validators import require_max_length, require_non_empty, require_positive
from ..core.constants import (
    MAX_NAME_LENGTH,
    MAX_SCHEDULE_AHEAD_DAYS,
    MAX_SESSION_MINUTES,
    MIN_SESSION_MINUTES,
    MS_PER_MINUTE,
)
from ..core.enums import AttendanceMethod, AttendanceStatus, EnrollmentStatus, Role, SessionStatus, SessionTimeStatus
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..core.permissions import Capability, require
from ..enrollments.repository import EnrollmentRepository
from .model import ClassSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleInput:
    name: str
    session_date: date
    start_time: time
    end_time: time
    timezone: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None


@dataclass(frozen=True)
class IssuedToken:
    token: str
    issued_minute: int
    session_id: str

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "session_id": self.session_id,
            "issued_minute": self.issued_minute,
            "issued_at": datetime.fromtimestamp(self.issued_minute * MS_PER_MINUTE / 1000, tz=timezone.utc).isoformat(),
        }


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _overlaps(a: ClassSession, start: time, end: time) -> bool:
    return start < a.end_time and end > a.start_time


class SessionService:
    """Use case: lecturers schedule, retire and close class sessions."""

    def __init__(
        self,
        sessions: SessionRepository,
        enrollments: EnrollmentRepository,
        attendance: AttendanceRepository,
        *,
        default_timezone: str = "UTC",
    ):
        self._sessions = sessions
        self._enrollments = enrollments
        self._attendance = attendance
        self._default_timezone = default_timezone

    def get_session(self, session_id: str) -> ClassSession:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session not found")
        return session

    def _validate(self, schedule: ScheduleInput, *, now: datetime) -> ScheduleInput:
        name = require_non_empty(schedule.name, "Session name")
        require_max_length(name, "Session name", MAX_NAME_LENGTH)
        location = (schedule.location or "").strip() or None
        require_max_length(location, "Location", MAX_NAME_LENGTH)
        capacity = require_positive(schedule.capacity, "Capacity")

        tz_name = (schedule.timezone or "").strip() or self._default_timezone
        zone = get_zone(tz_name)

        if schedule.start_time >= schedule.end_time:
            raise ValidationError("End time must be after start time")
        duration = _minutes(schedule.end_time) - _minutes(schedule.start_time)
        if duration > MAX_SESSION_MINUTES:
            raise ValidationError("Session duration cannot exceed 8 hours")
        if duration < MIN_SESSION_MINUTES:
            raise ValidationError(f"Session duration must be at least {MIN_SESSION_MINUTES} minutes")

        today = ensure_aware(now).astimezone(zone).date()
        if schedule.session_date > today + timedelta(days=MAX_SCHEDULE_AHEAD_DAYS):
            raise ValidationError("Session date cannot be more than 1 year in the future")

        return replace(schedule, name=name, location=location, capacity=capacity, timezone=tz_name)

    def _check_conflicts(
        self,
        *,
        section_id: Optional[str],
        schedule: ScheduleInput,
        ignore_session_id: Optional[str] = None,
    ) -> None:
        if not section_id:
            return
        for other in self._sessions.list_for_section_and_date(section_id, schedule.session_date):
            if other.session_id == ignore_session_id or other.is_cancelled:
                continue
            if _overlaps(other, schedule.start_time, schedule.end_time):
                raise ValidationError(f"Time conflict with existing session: {other.name}")

    def create_session(
        self,
        *,
        current_role: Role,
        course_id: str,
        section_id: Optional[str],
        schedule: ScheduleInput,
        now: Optional[datetime] = None,
    ) -> ClassSession:
        require(current_role, Capability.MANAGE_SESSIONS)
        course_id = require_non_empty(course_id, "Course ID")
        section_id = (section_id or "").strip() or None

        schedule = self._validate(schedule, now=now or now_utc())
        self._check_conflicts(section_id=section_id, schedule=schedule)

        session = ClassSession(
            session_id=str(uuid.uuid4()),
            course_id=course_id,
            section_id=section_id,
            name=schedule.name,
            session_date=schedule.session_date,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            timezone=schedule.timezone,
            status=SessionStatus.SCHEDULED,
            location=schedule.location,
            capacity=schedule.capacity,
        )
        self._sessions.create(session)
        logger.info("Created session %s (%s %s-%s)", session.session_id, session.session_date, session.start_time, session.end_time)
        return session

    def reschedule(
        self,
        *,
        current_role: Role,
        session_id: str,
        schedule: ScheduleInput,
        now: Optional[datetime] = None,
    ) -> ClassSession:
        """Change a session's timing; refused once attendance has been recorded."""

        require(current_role, Capability.MANAGE_SESSIONS)
        current = self.get_session(session_id)
        if not current.is_open:
            raise ValidationError("Only scheduled or active sessions can be changed")
        if self._attendance.count_for_session(session_id) > 0:
            raise ValidationError("Session cannot be changed after attendance has been recorded")

        schedule = self._validate(schedule, now=now or now_utc())
        self._check_conflicts(section_id=current.section_id, schedule=schedule, ignore_session_id=session_id)

        updated = replace(
            current,
            name=schedule.name,
            session_date=schedule.session_date,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            timezone=schedule.timezone,
            location=schedule.location,
            capacity=schedule.capacity,
        )
        if not self._sessions.update_schedule(updated):
            raise ValidationError("Failed to update session")
        return updated

    def cancel_session(self, *, current_role: Role, session_id: str) -> ClassSession:
        """Soft retirement; sessions referenced by records are never deleted."""

        require(current_role, Capability.MANAGE_SESSIONS)
        current = self.get_session(session_id)
        if current.status == SessionStatus.CANCELLED:
            return current
        if current.status == SessionStatus.COMPLETED:
            raise ValidationError("Completed sessions cannot be cancelled")

        self._sessions.set_status(session_id, SessionStatus.CANCELLED)
        logger.info("Cancelled session %s", session_id)
        return replace(current, status=SessionStatus.CANCELLED)

    def time_status(self, session: ClassSession, now: Optional[datetime] = None) -> SessionTimeStatus:
        return time_status(now or now_utc(), session.session_date, session.start_time, session.end_time, session.timezone)

    def current_token(self, *, current_role: Role, session_id: str, now: Optional[datetime] = None) -> IssuedToken:
        """Rotating proof token for the lecturer's display, only while the session runs."""

        require(current_role, Capability.DISPLAY_SESSION_TOKEN)
        now = now or now_utc()
        session = self.get_session(session_id)
        if not session.is_open:
            raise ValidationError("QR code is only available for scheduled sessions")
        if self.time_status(session, now) != SessionTimeStatus.ACTIVE:
            raise ValidationError("QR code will only be accessible during the session time")

        minute = issued_minute(now)
        return IssuedToken(token=encode_token(session.session_id, minute), issued_minute=minute, session_id=session.session_id)

    def close_session(self, *, current_role: Role, session_id: str, now: Optional[datetime] = None) -> int:
        require(current_role, Capability.MANAGE_SESSIONS)
        return self._close(self.get_session(session_id), now=now or now_utc())

    def close_expired_sessions(self, now: Optional[datetime] = None) -> dict[str, int]:
        """Close every open session whose end has passed; returns absentees per session."""

        now = now or now_utc()
        closed: dict[str, int] = {}
        for session in self._sessions.list_open():
            if self.time_status(session, now) == SessionTimeStatus.COMPLETED:
                closed[session.session_id] = self._close(session, now=now)
        return closed

    def _close(self, session: ClassSession, *, now: datetime) -> int:
        if session.is_cancelled:
            raise ValidationError("Cancelled sessions cannot be closed")

        absent = 0
        if session.section_id:
            for enrollment in self._enrollments.list_for_section(session.section_id, status=EnrollmentStatus.ACTIVE):
                if self._attendance.has_record(session.session_id, enrollment.student_id):
                    continue
                try:
                    self._attendance.insert(
                        record_id=str(uuid.uuid4()),
                        session_id=session.session_id,
                        student_id=enrollment.student_id,
                        status=AttendanceStatus.ABSENT,
                        marked_at=ensure_aware(now),
                        method=AttendanceMethod.AUTO,
                    )
                    absent += 1
                except DuplicateRecordError:
                    # The student marked attendance in the meantime.
                    continue

        if session.status != SessionStatus.COMPLETED:
            self._sessions.set_status(session.session_id, SessionStatus.COMPLETED)
        logger.info("Closed session %s (%d marked absent)", session.session_id, absent)
        return absent
