from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import ensure_aware, now_utc
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceMethod, AttendanceStatus, RejectKind, Role
from ..core.exceptions import AuthorizationError, DuplicateRecordError, PersistenceError
from ..core.permissions import Capability, can, require
from .admission import AdmissionContext, AdmissionRequest, AdmissionResult, Rejection
from .checks.duplicate_check import ALREADY_MARKED_MESSAGE
from .factory import AdmissionCheckFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: decide and record attendance attempts."""

    def __init__(self, attendance: AttendanceRepository, checks: AdmissionCheckFactory):
        self._attendance = attendance
        self._checks = checks

    def submit(
        self,
        *,
        current_role: Role,
        current_user_id: Optional[str],
        request: AdmissionRequest,
        now: Optional[datetime] = None,
    ) -> AdmissionResult:
        """Authorize the caller for this request, then run the admission check."""

        if request.method == AttendanceMethod.MANUAL:
            require(current_role, Capability.MARK_ANY_ATTENDANCE)
        elif not can(current_role, Capability.MARK_ANY_ATTENDANCE):
            require(current_role, Capability.MARK_OWN_ATTENDANCE)
            if str(current_user_id) != request.student_id:
                raise AuthorizationError("Students can only mark their own attendance")

        return self.mark_attendance(request, now=now)

    def mark_attendance(self, request: AdmissionRequest, *, now: Optional[datetime] = None) -> AdmissionResult:
        """Evaluate the checks in order; on success persist a PRESENT record.

        Business rejections come back as a result, never as an exception.
        """

        now = ensure_aware(now or now_utc())
        ctx = AdmissionContext(request=request, now=now)

        try:
            for check in self._checks.for_request(request):
                rejection = check.evaluate(ctx)
                if rejection is not None:
                    logger.info(
                        "Attendance rejected (%s): session=%s student=%s method=%s",
                        rejection.kind.value,
                        request.session_id,
                        request.student_id,
                        request.method.value,
                    )
                    return AdmissionResult.rejected(rejection)

            record = self._attendance.insert(
                record_id=str(uuid.uuid4()),
                session_id=request.session_id,
                student_id=request.student_id,
                status=AttendanceStatus.PRESENT,
                marked_at=now,
                method=request.method,
            )
        except DuplicateRecordError:
            logger.info("Attendance insert lost race: session=%s student=%s", request.session_id, request.student_id)
            return AdmissionResult.rejected(Rejection(RejectKind.ALREADY_MARKED, ALREADY_MARKED_MESSAGE))
        except PersistenceError as e:
            logger.error("Attendance check failed on storage: session=%s error=%s", request.session_id, e)
            return AdmissionResult.rejected(Rejection(RejectKind.PERSISTENCE_ERROR, str(e)))

        logger.info(
            "Attendance marked: session=%s student=%s method=%s",
            request.session_id,
            request.student_id,
            request.method.value,
        )
        return AdmissionResult.admitted(record)

    def list_for_session(self, session_id: str) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_session(session_id)

    def history_for_student(
        self,
        *,
        current_role: Role,
        current_user_id: Optional[str],
        student_id: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        if not can(current_role, Capability.VIEW_REPORTS) and str(current_user_id) != student_id:
            raise AuthorizationError("You can only view your own attendance")
        return self._attendance.list_for_student(student_id, limit)
