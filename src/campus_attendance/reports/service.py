from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..core.enums import AttendanceStatus, EnrollmentStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..core.permissions import Capability, can, require
from ..enrollments.repository import EnrollmentRepository
from ..sessions.repository import SessionRepository

ATTENDED = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)

CSV_FIELDS = [
    "session_id",
    "session_name",
    "session_date",
    "student_id",
    "status",
    "method",
    "marked_at",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: dict


def _rate(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part * 100.0 / whole, 2)


class AttendanceReportService:
    def __init__(
        self,
        sessions: SessionRepository,
        enrollments: EnrollmentRepository,
        attendance: AttendanceRepository,
    ):
        self._sessions = sessions
        self._enrollments = enrollments
        self._attendance = attendance

    def session_report(self, *, current_role: Role, session_id: str) -> ReportData:
        require(current_role, Capability.VIEW_REPORTS)

        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session not found")

        records = self._attendance.list_for_session(session_id)
        enrolled: list[str] = []
        if session.section_id:
            enrolled = [
                e.student_id
                for e in self._enrollments.list_for_section(session.section_id, status=EnrollmentStatus.ACTIVE)
            ]

        counts = {s: 0 for s in AttendanceStatus}
        out_rows: list[dict] = []
        for r in records:
            counts[r.status] += 1
            out_rows.append(
                {
                    "session_id": session.session_id,
                    "session_name": session.name,
                    "session_date": session.session_date.strftime("%Y-%m-%d"),
                    "student_id": r.student_id,
                    "status": r.status.value,
                    "method": r.method.value,
                    "marked_at": r.marked_at.isoformat(),
                }
            )

        marked = {r.student_id for r in records}
        # Only current enrollees count towards the rate, so it never exceeds 100%.
        active = set(enrolled)
        attended = sum(1 for r in records if r.student_id in active and r.status in ATTENDED)
        summary = {
            "session_id": session.session_id,
            "session_name": session.name,
            "status": session.status.value,
            "enrolled": len(enrolled),
            "present": counts[AttendanceStatus.PRESENT],
            "late": counts[AttendanceStatus.LATE],
            "absent": counts[AttendanceStatus.ABSENT],
            "unmarked": sum(1 for sid in enrolled if sid not in marked),
            "attendance_rate": _rate(attended, len(enrolled)),
        }

        out_rows.sort(key=lambda x: x["student_id"])
        return ReportData(rows=out_rows, summary=summary)

    def session_summary(self, *, current_role: Role, session_id: str) -> dict:
        return self.session_report(current_role=current_role, session_id=session_id).summary

    def student_course_rate(
        self,
        *,
        current_role: Role,
        current_user_id: Optional[str],
        student_id: str,
        course_id: str,
    ) -> dict:
        """Attended (present or late) over the course's non-cancelled sessions."""

        if not can(current_role, Capability.VIEW_REPORTS) and str(current_user_id) != student_id:
            raise AuthorizationError("You can only view your own attendance")

        total = 0
        attended = 0
        for session in self._sessions.list_for_course(course_id):
            if session.is_cancelled:
                continue
            total += 1
            record = self._attendance.get_for_session_and_student(session.session_id, student_id)
            if record and record.status in ATTENDED:
                attended += 1

        return {
            "student_id": student_id,
            "course_id": course_id,
            "total_sessions": total,
            "attended_sessions": attended,
            "attendance_rate": _rate(attended, total),
        }
