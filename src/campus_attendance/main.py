from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .attendance.controller import register as register_attendance
from .common.web import json_error
from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import (
    AuthorizationError,
    DomainError,
    DuplicateRecordError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .core.logging import setup_logging
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .enrollments.controller import register as register_enrollments
from .reports.controller import register as register_reports
from .sessions.controller import register as register_sessions

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e):
        return json_error(str(e), 400)

    @app.errorhandler(AuthorizationError)
    def _forbidden(e):
        return json_error(str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e):
        return json_error(str(e), 404)

    @app.errorhandler(DuplicateRecordError)
    def _duplicate(e):
        return json_error(str(e) or "Record already exists", 409)

    @app.errorhandler(PersistenceError)
    def _storage(e):
        logger.error("Storage failure: %s", e)
        return json_error("Storage is temporarily unavailable", 503)

    @app.errorhandler(DomainError)
    def _domain(e):
        return json_error(str(e), 400)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            logger.info("Demo seed ready")

        container = build_container(db_config=db_config, settings=settings)

    _register_error_handlers(app)

    register_sessions(app, container)
    register_enrollments(app, container)
    register_attendance(app, container)
    register_reports(app, container)

    @app.route("/healthz", methods=["GET"], endpoint="healthz")
    def healthz():
        return jsonify({"ok": True, "settings": settings_module})

    return app
