from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import AttendanceMethod, AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance mark. At most one per (session_id, student_id)."""

    record_id: str
    session_id: str
    student_id: str
    status: AttendanceStatus
    marked_at: datetime
    method: AttendanceMethod

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "session_id": self.session_id,
            "student_id": self.student_id,
            "status": self.status.value,
            "marked_at": self.marked_at.isoformat(),
            "method": self.method.value,
        }
