"""Close every open session whose end time has passed.

Students with no record are marked absent (method `auto`). Meant to run from
cron every few minutes; re-running is harmless.
"""
from __future__ import annotations

import importlib

from dotenv import load_dotenv

from campus_attendance.config import get_settings_module
from campus_attendance.container import build_container
from campus_attendance.core.logging import setup_logging


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    closed = container.session_service.close_expired_sessions()

    total = sum(closed.values())
    print(f"OK: Closed {len(closed)} session(s), marked {total} student(s) absent")


if __name__ == "__main__":
    main()
