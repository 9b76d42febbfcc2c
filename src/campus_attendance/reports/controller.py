from __future__ import annotations

import csv
import io

from flask import Flask, jsonify

from ..common.web import capability_required, current_role, current_user_id, login_required
from ..core.permissions import Capability
from ..container import Container
from .service import CSV_FIELDS, ReportData


def register(app: Flask, container: Container) -> None:
    def _write_report_csv(*, data: ReportData, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/sessions/<session_id>", methods=["GET"], endpoint="api_reports_session")
    @capability_required(Capability.VIEW_REPORTS)
    def api_reports_session(session_id: str):
        data = container.report_service.session_report(current_role=current_role(), session_id=session_id)
        return jsonify({"ok": True, "summary": data.summary, "rows": data.rows})

    @app.route("/api/reports/sessions/<session_id>.csv", methods=["GET"], endpoint="api_reports_session_csv")
    @capability_required(Capability.VIEW_REPORTS)
    def api_reports_session_csv(session_id: str):
        data = container.report_service.session_report(current_role=current_role(), session_id=session_id)
        return _write_report_csv(data=data, filename=f"attendance_{session_id}.csv")

    @app.route(
        "/api/reports/students/<student_id>/courses/<course_id>",
        methods=["GET"],
        endpoint="api_reports_student_course",
    )
    @login_required
    def api_reports_student_course(student_id: str, course_id: str):
        rate = container.report_service.student_course_rate(
            current_role=current_role(),
            current_user_id=current_user_id(),
            student_id=student_id,
            course_id=course_id,
        )
        return jsonify({"ok": True, **rate})
