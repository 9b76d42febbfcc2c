from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import SessionStatus
from .model import ClassSession


class SessionRepository(Protocol):
    """Storage interface for class sessions.

    Sessions are never deleted; retirement is a status change.
    """

    def get_by_id(self, session_id: str) -> Optional[ClassSession]:
        raise NotImplementedError

    def create(self, session: ClassSession) -> None:
        raise NotImplementedError

    def update_schedule(self, session: ClassSession) -> bool:
        """Overwrite name/date/times/zone/location/capacity of an existing session."""

        raise NotImplementedError

    def set_status(self, session_id: str, status: SessionStatus) -> bool:
        raise NotImplementedError

    def list_for_section_and_date(self, section_id: str, session_date: date) -> Sequence[ClassSession]:
        raise NotImplementedError

    def list_for_course(self, course_id: str) -> Sequence[ClassSession]:
        raise NotImplementedError

    def list_open(self) -> Sequence[ClassSession]:
        raise NotImplementedError
