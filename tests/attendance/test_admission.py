from __future__ import annotations

import base64
from dataclasses import replace
from datetime import date, datetime, time, timedelta, timezone

import pytest

from campus_attendance.attendance.admission import AdmissionRequest
from campus_attendance.attendance.token import encode_token, issued_minute
from campus_attendance.core.enums import (
    AttendanceMethod,
    AttendanceStatus,
    EnrollmentStatus,
    RejectKind,
    Role,
    SessionStatus,
)
from campus_attendance.core.exceptions import AuthorizationError, PersistenceError, ValidationError
from campus_attendance.sessions.model import ClassSession

SESSION_ID = "sess-1"
STUDENT_ID = "stu-1"


def at(hour: int, minute: int, second: int = 0) -> datetime:
    return datetime(2024, 3, 1, hour, minute, second, tzinfo=timezone.utc)


def qr_request(token: str, *, session_id: str = SESSION_ID, student_id: str = STUDENT_ID) -> AdmissionRequest:
    return AdmissionRequest(session_id=session_id, student_id=student_id, method=AttendanceMethod.QR_CODE, token=token)


def token_at(hour: int, minute: int, session_id: str = SESSION_ID) -> str:
    return encode_token(session_id, issued_minute(at(hour, minute)))


@pytest.fixture
def service(container, demo_session, enrolled_student):
    return container.attendance_service


def test_token_from_0905_is_valid_at_0912(service, attendance_repo):
    result = service.mark_attendance(qr_request(token_at(9, 5)), now=at(9, 12))

    assert result.ok
    assert result.to_dict() == {"ok": True}
    record = attendance_repo.get_for_session_and_student(SESSION_ID, STUDENT_ID)
    assert record.status == AttendanceStatus.PRESENT
    assert record.method == AttendanceMethod.QR_CODE
    assert record.marked_at == at(9, 12)


def test_token_from_0905_is_expired_at_0920(service, attendance_repo):
    result = service.mark_attendance(qr_request(token_at(9, 5)), now=at(9, 20))

    assert not result.ok
    assert result.error_kind == RejectKind.TOKEN_EXPIRED
    assert "expired" in result.message
    assert attendance_repo.records == {}


def test_token_from_the_future_is_rejected(service):
    result = service.mark_attendance(qr_request(token_at(9, 20)), now=at(9, 12))

    assert result.error_kind == RejectKind.TOKEN_FROM_FUTURE


def test_foreign_session_token_reports_mismatch_not_expiry(service):
    stale_foreign = token_at(8, 0, session_id="other-session")

    result = service.mark_attendance(qr_request(stale_foreign), now=at(9, 12))

    assert result.error_kind == RejectKind.SESSION_MISMATCH


def test_malformed_token(service):
    result = service.mark_attendance(qr_request("%%%"), now=at(9, 12))

    assert result.error_kind == RejectKind.MALFORMED_TOKEN
    assert result.to_dict()["errorKind"] == "MalformedToken"


def test_dropped_enrollment_is_not_enrolled_even_with_valid_token(container, demo_session, enrollments_repo):
    enrollments_repo.add(STUDENT_ID, demo_session.section_id, EnrollmentStatus.DROPPED)

    result = container.attendance_service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))

    assert result.error_kind == RejectKind.NOT_ENROLLED


def test_enrollment_in_another_section_is_not_enough(container, demo_session, enrollments_repo):
    enrollments_repo.add(STUDENT_ID, "SEC-B")

    result = container.attendance_service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))

    assert result.error_kind == RejectKind.NOT_ENROLLED


def test_session_without_section_rejects_not_enrolled(container, sessions_repo, demo_session, enrolled_student):
    sessions_repo.add(replace(demo_session, section_id=None))

    result = container.attendance_service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))

    assert result.error_kind == RejectKind.NOT_ENROLLED


@pytest.mark.parametrize(
    "now, ok",
    [
        (at(8, 59, 59), False),
        (at(9, 0), True),
        (at(11, 0), True),
        (at(11, 0, 1), False),
    ],
)
def test_time_window_bounds_are_inclusive(service, now, ok):
    req = AdmissionRequest(session_id=SESSION_ID, student_id=STUDENT_ID, method=AttendanceMethod.FACIAL_RECOGNITION)

    result = service.mark_attendance(req, now=now)

    assert result.ok is ok
    if not ok:
        assert result.error_kind == RejectKind.OUTSIDE_WINDOW


def test_token_checks_run_before_window(service):
    # Fresh token, but the session has already ended.
    result = service.mark_attendance(qr_request(token_at(11, 5)), now=at(11, 10))

    assert result.error_kind == RejectKind.OUTSIDE_WINDOW

    result = service.mark_attendance(qr_request(token_at(8, 0)), now=at(11, 10))

    assert result.error_kind == RejectKind.TOKEN_EXPIRED


def test_window_uses_session_time_zone(container, sessions_repo, enrollments_repo):
    sessions_repo.add(
        ClassSession(
            session_id="sess-hcm",
            course_id="CS101",
            section_id="SEC-A",
            name="Morning lab",
            session_date=date(2024, 3, 1),
            start_time=time(9, 0),
            end_time=time(11, 0),
            timezone="Asia/Ho_Chi_Minh",
        )
    )
    enrollments_repo.add(STUDENT_ID, "SEC-A")
    req = AdmissionRequest(session_id="sess-hcm", student_id=STUDENT_ID, method=AttendanceMethod.FACIAL_RECOGNITION)

    # 09:30 in Ho Chi Minh City (UTC+7) is 02:30 UTC.
    outside = container.attendance_service.mark_attendance(req, now=at(9, 30))
    inside = container.attendance_service.mark_attendance(req, now=at(2, 30))

    assert outside.error_kind == RejectKind.OUTSIDE_WINDOW
    assert inside.ok


def test_unknown_session(service):
    req = AdmissionRequest(session_id="missing", student_id=STUDENT_ID, method=AttendanceMethod.FACIAL_RECOGNITION)

    result = service.mark_attendance(req, now=at(9, 12))

    assert result.error_kind == RejectKind.SESSION_NOT_FOUND


def test_cancelled_session_is_not_found(service, sessions_repo):
    sessions_repo.set_status(SESSION_ID, SessionStatus.CANCELLED)

    result = service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))

    assert result.error_kind == RejectKind.SESSION_NOT_FOUND


def test_second_attempt_is_already_marked(service, attendance_repo):
    first = service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))
    second = service.mark_attendance(qr_request(token_at(9, 11)), now=at(9, 13))

    assert first.ok
    assert second.error_kind == RejectKind.ALREADY_MARKED
    assert len(attendance_repo.records) == 1


def test_prior_absent_record_also_blocks(service, attendance_repo):
    attendance_repo.insert(
        record_id="r0",
        session_id=SESSION_ID,
        student_id=STUDENT_ID,
        status=AttendanceStatus.ABSENT,
        marked_at=at(9, 1),
        method=AttendanceMethod.AUTO,
    )

    result = service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))

    assert result.error_kind == RejectKind.ALREADY_MARKED


def test_concurrent_insert_surfaces_as_already_marked(service, attendance_repo, monkeypatch):
    # Both attempts pass the read; the unique key stops the second insert.
    monkeypatch.setattr(attendance_repo, "has_record", lambda session_id, student_id: False)

    first = service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))
    second = service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))

    assert first.ok
    assert second.error_kind == RejectKind.ALREADY_MARKED
    assert len(attendance_repo.records) == 1


def test_storage_failure_during_lookup(service, attendance_repo, monkeypatch):
    def boom(session_id, student_id):
        raise PersistenceError("connection lost")

    monkeypatch.setattr(attendance_repo, "has_record", boom)

    result = service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))

    assert result.to_dict() == {"ok": False, "errorKind": "PersistenceError", "message": "connection lost"}


def test_storage_failure_during_insert(service, attendance_repo, monkeypatch):
    def boom(**kwargs):
        raise PersistenceError("disk full")

    monkeypatch.setattr(attendance_repo, "insert", boom)

    result = service.mark_attendance(qr_request(token_at(9, 10)), now=at(9, 12))

    assert result.error_kind == RejectKind.PERSISTENCE_ERROR


def test_tokenless_method_is_admitted_and_keeps_method(service, attendance_repo):
    req = AdmissionRequest(session_id=SESSION_ID, student_id=STUDENT_ID, method=AttendanceMethod.FACIAL_RECOGNITION)

    result = service.mark_attendance(req, now=at(9, 30))

    assert result.ok
    assert result.record.method == AttendanceMethod.FACIAL_RECOGNITION


def test_naive_now_is_treated_as_utc(service):
    result = service.mark_attendance(qr_request(token_at(9, 5)), now=datetime(2024, 3, 1, 9, 12))

    assert result.ok


def test_rejections_are_stable_on_repeat(service):
    req = qr_request(token_at(9, 5))

    first = service.mark_attendance(req, now=at(9, 20))
    second = service.mark_attendance(req, now=at(9, 20))

    assert first == second


def test_student_cannot_mark_someone_else(service):
    with pytest.raises(AuthorizationError):
        service.submit(
            current_role=Role.STUDENT,
            current_user_id="stu-2",
            request=qr_request(token_at(9, 10)),
            now=at(9, 12),
        )


def test_student_cannot_use_manual_method(service):
    req = AdmissionRequest(session_id=SESSION_ID, student_id=STUDENT_ID, method=AttendanceMethod.MANUAL)

    with pytest.raises(AuthorizationError):
        service.submit(current_role=Role.STUDENT, current_user_id=STUDENT_ID, request=req, now=at(9, 12))


def test_lecturer_can_mark_manually(service, attendance_repo):
    req = AdmissionRequest(session_id=SESSION_ID, student_id=STUDENT_ID, method=AttendanceMethod.MANUAL)

    result = service.submit(current_role=Role.LECTURER, current_user_id="lec-1", request=req, now=at(9, 12))

    assert result.ok
    assert attendance_repo.get_for_session_and_student(SESSION_ID, STUDENT_ID).method == AttendanceMethod.MANUAL


def test_student_history_is_private(service):
    with pytest.raises(AuthorizationError):
        service.history_for_student(current_role=Role.STUDENT, current_user_id="stu-2", student_id=STUDENT_ID)


def test_history_lists_most_recent_first(service, attendance_repo):
    for i, sid in enumerate(["a", "b", "c"]):
        attendance_repo.insert(
            record_id=f"r{i}",
            session_id=sid,
            student_id=STUDENT_ID,
            status=AttendanceStatus.PRESENT,
            marked_at=at(9, 0) + timedelta(days=i),
            method=AttendanceMethod.QR_CODE,
        )

    history = service.history_for_student(
        current_role=Role.STUDENT, current_user_id=STUDENT_ID, student_id=STUDENT_ID, limit=2
    )

    assert [r.session_id for r in history] == ["c", "b"]


class TestFromPayload:
    def test_defaults_to_qr_code(self):
        req = AdmissionRequest.from_payload({"session_id": "s", "student_id": "u", "token": "t"})

        assert req.method == AttendanceMethod.QR_CODE
        assert req.has_token

    def test_empty_token_counts_as_absent(self):
        req = AdmissionRequest.from_payload(
            {"session_id": "s", "student_id": "u", "method": "facial_recognition", "token": ""}
        )

        assert req.token is None
        assert not req.has_token

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            {"student_id": "u"},
            {"session_id": "s"},
            {"session_id": "s", "student_id": "u", "method": "carrier_pigeon"},
            {"session_id": "s", "student_id": "u", "method": "auto"},
            {"session_id": "s", "student_id": "u", "token": 123},
        ],
    )
    def test_invalid_payloads(self, payload):
        with pytest.raises(ValidationError):
            AdmissionRequest.from_payload(payload)


def test_oversized_minute_is_malformed_not_a_crash(service, attendance_repo):
    huge = base64.b64encode(f"{SESSION_ID}:{'9' * 5000}".encode()).decode()

    result = service.mark_attendance(qr_request(huge), now=at(9, 30))

    assert result.error_kind == RejectKind.MALFORMED_TOKEN
    assert attendance_repo.records == {}


def test_closed_session_admits_nobody(container, sessions_repo, demo_session, enrollments_repo):
    sessions_repo.set_status(SESSION_ID, SessionStatus.COMPLETED)
    enrollments_repo.add("late-joiner", demo_session.section_id)
    req = AdmissionRequest(session_id=SESSION_ID, student_id="late-joiner", method=AttendanceMethod.FACIAL_RECOGNITION)

    result = container.attendance_service.mark_attendance(req, now=at(9, 30))

    assert result.error_kind == RejectKind.SESSION_NOT_FOUND
    assert "closed" in result.message
