from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_choice, require_non_empty
from ..core.enums import EnrollmentStatus, Role
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..core.permissions import Capability, require
from .model import Enrollment
from .repository import EnrollmentRepository

logger = logging.getLogger(__name__)


def is_actively_enrolled(enrollments: EnrollmentRepository, *, student_id: str, section_id: str) -> bool:
    """True iff exactly one ACTIVE enrollment binds the student to the section.

    Section level is authoritative: there is no fallback to course or program enrollment.
    """

    records = enrollments.list_for_student_and_section(student_id, section_id)
    return sum(1 for e in records if e.is_active) == 1


class EnrollmentService:
    """Use case: manage section enrollments (admin)."""

    def __init__(self, enrollments: EnrollmentRepository):
        self._enrollments = enrollments

    def is_actively_enrolled(self, student_id: str, section_id: str) -> bool:
        return is_actively_enrolled(self._enrollments, student_id=student_id, section_id=section_id)

    def enroll(
        self,
        *,
        current_role: Role,
        student_id: str,
        section_id: str,
        enrollment_date: Optional[date] = None,
    ) -> Enrollment:
        require(current_role, Capability.MANAGE_ENROLLMENTS)
        student_id = require_non_empty(student_id, "Student ID")
        section_id = require_non_empty(section_id, "Section ID")

        if self._enrollments.list_for_student_and_section(student_id, section_id):
            raise ValidationError("Student is already enrolled in this section")

        enrollment = Enrollment(
            enrollment_id=str(uuid.uuid4()),
            student_id=student_id,
            section_id=section_id,
            status=EnrollmentStatus.ACTIVE,
            enrollment_date=enrollment_date or date.today(),
        )
        try:
            self._enrollments.create(
                enrollment_id=enrollment.enrollment_id,
                student_id=enrollment.student_id,
                section_id=enrollment.section_id,
                enrollment_date=enrollment.enrollment_date,
                status=enrollment.status,
            )
        except DuplicateRecordError:
            raise ValidationError("Student is already enrolled in this section")

        logger.info("Enrolled student %s in section %s", student_id, section_id)
        return enrollment

    def change_status(self, *, current_role: Role, enrollment_id: str, status: str) -> Enrollment:
        """Status transition only; enrollments are never removed."""

        require(current_role, Capability.MANAGE_ENROLLMENTS)
        new_status = require_choice(status, "Status", EnrollmentStatus)

        current = self._enrollments.get_by_id(enrollment_id)
        if not current:
            raise NotFoundError("Enrollment not found")
        if current.status == new_status:
            return current

        if not self._enrollments.update_status(enrollment_id, new_status):
            raise ValidationError("Failed to update enrollment status")

        logger.info("Enrollment %s: %s -> %s", enrollment_id, current.status.value, new_status.value)
        return Enrollment(
            enrollment_id=current.enrollment_id,
            student_id=current.student_id,
            section_id=current.section_id,
            status=new_status,
            enrollment_date=current.enrollment_date,
        )

    def list_active_students(self, section_id: str) -> Sequence[str]:
        return [e.student_id for e in self._enrollments.list_for_section(section_id, status=EnrollmentStatus.ACTIVE)]
