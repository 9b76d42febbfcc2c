from __future__ import annotations

import logging
from typing import Optional

from ...core.enums import RejectKind
from ...enrollments.repository import EnrollmentRepository
from ...enrollments.service import is_actively_enrolled
from ..admission import AdmissionContext, Rejection
from .base import AdmissionCheck

logger = logging.getLogger(__name__)


class EnrollmentCheck(AdmissionCheck):
    def __init__(self, enrollments: EnrollmentRepository):
        self._enrollments = enrollments

    def evaluate(self, ctx: AdmissionContext) -> Optional[Rejection]:
        section_id = ctx.session.section_id
        if not section_id:
            return Rejection(
                RejectKind.NOT_ENROLLED,
                "This session is not assigned to any section. Please contact your lecturer.",
            )

        if is_actively_enrolled(self._enrollments, student_id=ctx.request.student_id, section_id=section_id):
            return None

        logger.info(
            "Section enrollment check failed: student=%s section=%s course=%s",
            ctx.request.student_id,
            section_id,
            ctx.session.course_id,
        )
        return Rejection(
            RejectKind.NOT_ENROLLED,
            "You are not enrolled in this section or the session is not for your section.",
        )
