from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import session_bounds
from ..core.enums import SessionStatus


@dataclass(frozen=True)
class ClassSession:
    """A scheduled class meeting of one section.

    Times are wall-clock values in the session's own `timezone`.
    """

    session_id: str
    course_id: str
    section_id: Optional[str]
    name: str
    session_date: date
    start_time: time
    end_time: time
    timezone: str = "UTC"
    status: SessionStatus = SessionStatus.SCHEDULED
    location: Optional[str] = None
    capacity: Optional[int] = None

    @property
    def is_cancelled(self) -> bool:
        return self.status == SessionStatus.CANCELLED

    @property
    def is_open(self) -> bool:
        return self.status in (SessionStatus.SCHEDULED, SessionStatus.ACTIVE)

    def bounds(self) -> tuple[datetime, datetime]:
        return session_bounds(self.session_date, self.start_time, self.end_time, self.timezone)

    def to_dict(self) -> dict:
        start, end = self.bounds()
        return {
            "session_id": self.session_id,
            "course_id": self.course_id,
            "section_id": self.section_id,
            "name": self.name,
            "session_date": self.session_date.strftime("%Y-%m-%d"),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "timezone": self.timezone,
            "status": self.status.value,
            "location": self.location,
            "capacity": self.capacity,
            "starts_at": start.isoformat(),
            "ends_at": end.isoformat(),
        }
