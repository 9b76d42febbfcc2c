from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import EnrollmentStatus
from .model import Enrollment


class EnrollmentRepository(Protocol):
    def get_by_id(self, enrollment_id: str) -> Optional[Enrollment]:
        raise NotImplementedError

    def list_for_student_and_section(self, student_id: str, section_id: str) -> Sequence[Enrollment]:
        raise NotImplementedError

    def list_for_section(self, section_id: str, *, status: Optional[EnrollmentStatus] = None) -> Sequence[Enrollment]:
        raise NotImplementedError

    def create(
        self,
        *,
        enrollment_id: str,
        student_id: str,
        section_id: str,
        enrollment_date: date,
        status: EnrollmentStatus,
    ) -> None:
        """Raises DuplicateRecordError when (student, section) already exists."""

        raise NotImplementedError

    def update_status(self, enrollment_id: str, status: EnrollmentStatus) -> bool:
        raise NotImplementedError
