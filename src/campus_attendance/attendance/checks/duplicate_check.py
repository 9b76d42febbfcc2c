from __future__ import annotations

from typing import Optional

from ...core.enums import RejectKind
from ..admission import AdmissionContext, Rejection
from ..repository import AttendanceRepository
from .base import AdmissionCheck

ALREADY_MARKED_MESSAGE = "Attendance has already been marked for this session."


class DuplicateCheck(AdmissionCheck):
    """Early answer only; the unique key on insert is what actually guarantees one record."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def evaluate(self, ctx: AdmissionContext) -> Optional[Rejection]:
        if self._attendance.has_record(ctx.request.session_id, ctx.request.student_id):
            return Rejection(RejectKind.ALREADY_MARKED, ALREADY_MARKED_MESSAGE)
        return None
