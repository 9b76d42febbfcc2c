from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import EnrollmentStatus


@dataclass(frozen=True)
class Enrollment:
    """Binds a student to a section. Only ACTIVE enrollments authorize attendance."""

    enrollment_id: str
    student_id: str
    section_id: str
    status: EnrollmentStatus
    enrollment_date: date

    @property
    def is_active(self) -> bool:
        return self.status == EnrollmentStatus.ACTIVE

    def to_dict(self) -> dict:
        return {
            "enrollment_id": self.enrollment_id,
            "student_id": self.student_id,
            "section_id": self.section_id,
            "status": self.status.value,
            "enrollment_date": self.enrollment_date.strftime("%Y-%m-%d"),
        }
