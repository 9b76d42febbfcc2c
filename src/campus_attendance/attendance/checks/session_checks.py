from __future__ import annotations

from typing import Optional

from ...common.datetime_utils import ensure_aware, is_within_window
from ...core.enums import RejectKind, SessionStatus
from ...sessions.repository import SessionRepository
from ..admission import AdmissionContext, Rejection
from .base import AdmissionCheck


class SessionLookupCheck(AdmissionCheck):
    def __init__(self, sessions: SessionRepository):
        self._sessions = sessions

    def evaluate(self, ctx: AdmissionContext) -> Optional[Rejection]:
        session = self._sessions.get_by_id(ctx.request.session_id)
        if session is None:
            return Rejection(RejectKind.SESSION_NOT_FOUND, "Invalid or expired session.")
        if session.is_cancelled:
            return Rejection(RejectKind.SESSION_NOT_FOUND, "This session has been cancelled.")
        if session.status == SessionStatus.COMPLETED:
            return Rejection(RejectKind.SESSION_NOT_FOUND, "This session has been closed.")
        ctx.session = session
        return None


class TimeWindowCheck(AdmissionCheck):
    def evaluate(self, ctx: AdmissionContext) -> Optional[Rejection]:
        s = ctx.session
        if is_within_window(ctx.now, s.session_date, s.start_time, s.end_time, s.timezone):
            return None

        start, end = s.bounds()
        return Rejection(
            RejectKind.OUTSIDE_WINDOW,
            "Attendance can only be marked within the session time. "
            f"Current time: {ensure_aware(ctx.now).isoformat()}, "
            f"Session start: {start.isoformat()}, Session end: {end.isoformat()}",
        )
