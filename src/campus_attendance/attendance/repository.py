from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceMethod, AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def has_record(self, session_id: str, student_id: str) -> bool:
        """True when any record exists for the pair, whatever its status."""

        raise NotImplementedError

    def get_for_session_and_student(self, session_id: str, student_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        """Atomic insert-or-reject.

        Must raise DuplicateRecordError when a record for (session_id, student_id)
        already exists, including one written concurrently after a read.
        """

        raise NotImplementedError

    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_session(self, session_id: str) -> int:
        raise NotImplementedError
