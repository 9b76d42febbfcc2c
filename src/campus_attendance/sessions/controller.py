from __future__ import annotations

import io
from typing import Optional

import qrcode
from flask import Flask, jsonify, send_file

from ..common.datetime_utils import parse_clock_time, parse_iso_date
from ..common.web import capability_required, current_role, login_required, request_json
from ..core.exceptions import ValidationError
from ..core.permissions import Capability
from ..container import Container
from .service import ScheduleInput


def _optional_str(value) -> Optional[str]:
    return str(value) if value not in ("", None) else None


def _schedule_from(payload: dict) -> ScheduleInput:
    try:
        session_date = parse_iso_date(str(payload.get("session_date") or ""))
    except ValueError:
        raise ValidationError("session_date must be YYYY-MM-DD")

    capacity = payload.get("capacity")
    return ScheduleInput(
        name=str(payload.get("name") or ""),
        session_date=session_date,
        start_time=parse_clock_time(str(payload.get("start_time") or "")),
        end_time=parse_clock_time(str(payload.get("end_time") or "")),
        timezone=_optional_str(payload.get("timezone")),
        location=_optional_str(payload.get("location")),
        capacity=capacity if capacity not in ("", None) else None,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions", methods=["POST"], endpoint="api_sessions_create")
    @capability_required(Capability.MANAGE_SESSIONS)
    def api_sessions_create():
        payload = request_json()
        created = container.session_service.create_session(
            current_role=current_role(),
            course_id=str(payload.get("course_id") or ""),
            section_id=payload.get("section_id"),
            schedule=_schedule_from(payload),
        )
        return jsonify({"ok": True, "session": created.to_dict()}), 201

    @app.route("/api/sessions/<session_id>", methods=["GET"], endpoint="api_sessions_get")
    @login_required
    def api_sessions_get(session_id: str):
        s = container.session_service.get_session(session_id)
        data = s.to_dict()
        data["time_status"] = container.session_service.time_status(s).value
        return jsonify({"ok": True, "session": data})

    @app.route("/api/sessions/<session_id>", methods=["PUT"], endpoint="api_sessions_update")
    @capability_required(Capability.MANAGE_SESSIONS)
    def api_sessions_update(session_id: str):
        updated = container.session_service.reschedule(
            current_role=current_role(),
            session_id=session_id,
            schedule=_schedule_from(request_json()),
        )
        return jsonify({"ok": True, "session": updated.to_dict()})

    @app.route("/api/sessions/<session_id>/cancel", methods=["POST"], endpoint="api_sessions_cancel")
    @capability_required(Capability.MANAGE_SESSIONS)
    def api_sessions_cancel(session_id: str):
        cancelled = container.session_service.cancel_session(current_role=current_role(), session_id=session_id)
        return jsonify({"ok": True, "session": cancelled.to_dict()})

    @app.route("/api/sessions/<session_id>/close", methods=["POST"], endpoint="api_sessions_close")
    @capability_required(Capability.MANAGE_SESSIONS)
    def api_sessions_close(session_id: str):
        absent = container.session_service.close_session(current_role=current_role(), session_id=session_id)
        return jsonify({"ok": True, "marked_absent": absent})

    @app.route("/api/sessions/<session_id>/token", methods=["GET"], endpoint="api_sessions_token")
    @capability_required(Capability.DISPLAY_SESSION_TOKEN)
    def api_sessions_token(session_id: str):
        issued = container.session_service.current_token(current_role=current_role(), session_id=session_id)
        return jsonify({"ok": True, **issued.to_dict()})

    @app.route("/api/sessions/<session_id>/qr.png", methods=["GET"], endpoint="api_sessions_qr")
    @capability_required(Capability.DISPLAY_SESSION_TOKEN)
    def api_sessions_qr(session_id: str):
        """Current token as a PNG for the lecturer's screen; rotates every minute."""

        issued = container.session_service.current_token(current_role=current_role(), session_id=session_id)

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(issued.token)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)

        response = send_file(buf, mimetype="image/png")
        response.headers["Cache-Control"] = "no-store"
        return response
