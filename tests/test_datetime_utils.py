from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest

from campus_attendance.common.datetime_utils import (
    is_within_window,
    parse_clock_time,
    session_bounds,
    time_status,
)
from campus_attendance.core.enums import SessionTimeStatus
from campus_attendance.core.exceptions import ValidationError

D = date(2024, 3, 1)


def test_parse_clock_time_accepts_minutes_and_seconds():
    assert parse_clock_time("09:05") == time(9, 5)
    assert parse_clock_time("09:05:30") == time(9, 5, 30)


@pytest.mark.parametrize("value", ["", "9am", "25:00", None])
def test_parse_clock_time_rejects_garbage(value):
    with pytest.raises(ValidationError):
        parse_clock_time(value)


def test_bounds_are_in_session_zone():
    start, end = session_bounds(D, time(9, 0), time(11, 0), "Europe/Berlin")

    assert start.astimezone(timezone.utc) == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
    assert end.astimezone(timezone.utc) == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("zone", ["Mars/Olympus_Mons", "America", "Europe"])
def test_unknown_zone_is_a_validation_error(zone):
    with pytest.raises(ValidationError):
        session_bounds(D, time(9, 0), time(11, 0), zone)


@pytest.mark.parametrize(
    "now, expected",
    [
        (datetime(2024, 3, 1, 8, 59, tzinfo=timezone.utc), False),
        (datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc), True),
        (datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc), True),
        (datetime(2024, 3, 1, 11, 0, tzinfo=timezone.utc), True),
        (datetime(2024, 3, 1, 11, 1, tzinfo=timezone.utc), False),
        (datetime(2024, 3, 2, 10, 0, tzinfo=timezone.utc), False),
    ],
)
def test_is_within_window(now, expected):
    assert is_within_window(now, D, time(9, 0), time(11, 0)) is expected


def test_time_status_progression():
    def status(h, m):
        return time_status(datetime(2024, 3, 1, h, m, tzinfo=timezone.utc), D, time(9, 0), time(11, 0))

    assert status(8, 0) == SessionTimeStatus.UPCOMING
    assert status(10, 0) == SessionTimeStatus.ACTIVE
    assert status(12, 0) == SessionTimeStatus.COMPLETED
