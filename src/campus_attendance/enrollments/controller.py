from __future__ import annotations

from datetime import date

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.web import capability_required, current_role, request_json
from ..core.exceptions import ValidationError
from ..core.permissions import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/enrollments", methods=["POST"], endpoint="api_enrollments_create")
    @capability_required(Capability.MANAGE_ENROLLMENTS)
    def api_enrollments_create():
        payload = request_json()

        enrollment_date = None
        if payload.get("enrollment_date"):
            try:
                enrollment_date = parse_iso_date(str(payload["enrollment_date"]))
            except ValueError:
                raise ValidationError("enrollment_date must be YYYY-MM-DD")

        enrollment = container.enrollment_service.enroll(
            current_role=current_role(),
            student_id=str(payload.get("student_id") or ""),
            section_id=str(payload.get("section_id") or ""),
            enrollment_date=enrollment_date or date.today(),
        )
        return jsonify({"ok": True, "enrollment": enrollment.to_dict()}), 201

    @app.route("/api/enrollments/<enrollment_id>/status", methods=["POST"], endpoint="api_enrollments_status")
    @capability_required(Capability.MANAGE_ENROLLMENTS)
    def api_enrollments_status(enrollment_id: str):
        payload = request_json()
        enrollment = container.enrollment_service.change_status(
            current_role=current_role(),
            enrollment_id=enrollment_id,
            status=str(payload.get("status") or ""),
        )
        return jsonify({"ok": True, "enrollment": enrollment.to_dict()})

    @app.route("/api/sections/<section_id>/students", methods=["GET"], endpoint="api_section_students")
    @capability_required(Capability.VIEW_REPORTS)
    def api_section_students(section_id: str):
        students = container.enrollment_service.list_active_students(section_id)
        return jsonify({"ok": True, "section_id": section_id, "students": list(students)})
