from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import capability_required, current_role, current_user_id, login_required, request_json
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import RejectKind
from ..core.exceptions import ValidationError
from ..core.permissions import Capability, can
from ..container import Container
from .admission import AdmissionRequest

REJECTION_STATUS = {
    RejectKind.MALFORMED_TOKEN: 400,
    RejectKind.SESSION_MISMATCH: 400,
    RejectKind.TOKEN_EXPIRED: 400,
    RejectKind.TOKEN_FROM_FUTURE: 400,
    RejectKind.OUTSIDE_WINDOW: 400,
    RejectKind.SESSION_NOT_FOUND: 404,
    RejectKind.NOT_ENROLLED: 403,
    RejectKind.ALREADY_MARKED: 409,
    RejectKind.PERSISTENCE_ERROR: 503,
}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    @login_required
    def api_attendance_mark():
        payload = request_json()
        # Students submit for themselves; the body may omit student_id.
        if not payload.get("student_id") and not can(current_role(), Capability.MARK_ANY_ATTENDANCE):
            payload = {**payload, "student_id": current_user_id()}

        admission = AdmissionRequest.from_payload(payload)
        result = container.attendance_service.submit(
            current_role=current_role(),
            current_user_id=current_user_id(),
            request=admission,
        )
        if result.ok:
            return jsonify(result.to_dict()), 200
        return jsonify(result.to_dict()), REJECTION_STATUS.get(result.error_kind, 400)

    @app.route("/api/sessions/<session_id>/attendance", methods=["GET"], endpoint="api_session_attendance")
    @capability_required(Capability.VIEW_REPORTS)
    def api_session_attendance(session_id: str):
        container.session_service.get_session(session_id)
        records = container.attendance_service.list_for_session(session_id)
        return jsonify({"ok": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/students/<student_id>/attendance", methods=["GET"], endpoint="api_student_attendance")
    @login_required
    def api_student_attendance(student_id: str):
        limit_s = request.args.get("limit") or str(DEFAULT_HISTORY_LIMIT)
        if not limit_s.isdigit() or int(limit_s) < 1:
            raise ValidationError("limit must be a positive number")

        records = container.attendance_service.history_for_student(
            current_role=current_role(),
            current_user_id=current_user_id(),
            student_id=student_id,
            limit=int(limit_s),
        )
        return jsonify({"ok": True, "records": [r.to_dict() for r in records]})
