from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.enums import SessionTimeStatus
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock_time(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) 24-hour string into time."""
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")


def now_utc() -> datetime:
    """Current instant (timezone-aware, UTC).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def get_zone(name: str) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # Names such as "America" resolve to a tzdata directory.
        raise ValidationError(f"Unknown time zone {name!r}")


def ensure_aware(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_epoch_ms(value: datetime) -> int:
    return int(ensure_aware(value).timestamp() * 1000)


def session_bounds(session_date: date, start_time: time, end_time: time, tz_name: str) -> tuple[datetime, datetime]:
    """Absolute start/end instants of a session, both in the session's own zone."""
    zone = get_zone(tz_name)
    start = datetime.combine(session_date, start_time, tzinfo=zone)
    end = datetime.combine(session_date, end_time, tzinfo=zone)
    return start, end


def is_within_window(
    now: datetime,
    session_date: date,
    start_time: time,
    end_time: time,
    tz_name: str = "UTC",
) -> bool:
    start, end = session_bounds(session_date, start_time, end_time, tz_name)
    return start <= ensure_aware(now) <= end


def time_status(
    now: datetime,
    session_date: date,
    start_time: time,
    end_time: time,
    tz_name: str = "UTC",
) -> SessionTimeStatus:
    start, end = session_bounds(session_date, start_time, end_time, tz_name)
    now = ensure_aware(now)
    if now < start:
        return SessionTimeStatus.UPCOMING
    if now <= end:
        return SessionTimeStatus.ACTIVE
    return SessionTimeStatus.COMPLETED
