from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_TOKEN_MAX_AGE_SECONDS, DEFAULT_TOKEN_MAX_FUTURE_SECONDS
from ..enrollments.repository import EnrollmentRepository
from ..sessions.repository import SessionRepository
from .admission import AdmissionRequest
from .checks.base import AdmissionCheck
from .checks.duplicate_check import DuplicateCheck
from .checks.enrollment_check import EnrollmentCheck
from .checks.session_checks import SessionLookupCheck, TimeWindowCheck
from .checks.token_checks import SessionMatchCheck, TokenFormatCheck, TokenFreshnessCheck
from .repository import AttendanceRepository


@dataclass
class AdmissionCheckFactory:
    """Factory Pattern: build the ordered check chain for one request.

    Order: token format, session match, freshness (token only), then session
    lookup, time window, enrollment, duplicate. Attempts without a token
    (e.g. facial recognition) skip the token steps entirely.
    """

    sessions: SessionRepository
    enrollments: EnrollmentRepository
    attendance: AttendanceRepository
    token_max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS
    token_max_future_seconds: int = DEFAULT_TOKEN_MAX_FUTURE_SECONDS

    def token_checks(self) -> list[AdmissionCheck]:
        return [
            TokenFormatCheck(),
            SessionMatchCheck(),
            TokenFreshnessCheck(
                max_age_ms=self.token_max_age_seconds * 1000,
                max_future_ms=self.token_max_future_seconds * 1000,
            ),
        ]

    def for_request(self, request: AdmissionRequest) -> list[AdmissionCheck]:
        checks = self.token_checks() if request.has_token else []
        checks += [
            SessionLookupCheck(self.sessions),
            TimeWindowCheck(),
            EnrollmentCheck(self.enrollments),
            DuplicateCheck(self.attendance),
        ]
        return checks
