from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from ..common.validators import require_choice, require_non_empty
from ..core.enums import AttendanceMethod, RejectKind
from ..core.exceptions import ValidationError
from ..sessions.model import ClassSession
from .model import AttendanceRecord
from .token import DecodedToken


@dataclass(frozen=True)
class AdmissionRequest:
    """Inbound attendance attempt: (session, student, optional proof)."""

    session_id: str
    student_id: str
    method: AttendanceMethod
    token: Optional[str] = None

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "AdmissionRequest":
        if not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")

        session_id = require_non_empty(payload.get("session_id") or "", "session_id")
        student_id = require_non_empty(payload.get("student_id") or "", "student_id")
        method = require_choice(payload.get("method") or AttendanceMethod.QR_CODE.value, "method", AttendanceMethod)
        if method == AttendanceMethod.AUTO:
            raise ValidationError("method 'auto' is reserved for session closing")

        token = payload.get("token")
        if token is not None and not isinstance(token, str):
            raise ValidationError("token must be a string")

        return cls(session_id=session_id, student_id=student_id, method=method, token=token or None)


@dataclass(frozen=True)
class Rejection:
    kind: RejectKind
    message: str


@dataclass(frozen=True)
class AdmissionResult:
    ok: bool
    error_kind: Optional[RejectKind] = None
    message: str = ""
    record: Optional[AttendanceRecord] = None

    @classmethod
    def admitted(cls, record: AttendanceRecord) -> "AdmissionResult":
        return cls(ok=True, message="Attendance marked successfully!", record=record)

    @classmethod
    def rejected(cls, rejection: Rejection) -> "AdmissionResult":
        return cls(ok=False, error_kind=rejection.kind, message=rejection.message)

    def to_dict(self) -> dict:
        if self.ok:
            return {"ok": True}
        return {"ok": False, "errorKind": self.error_kind.value, "message": self.message}


@dataclass
class AdmissionContext:
    """State shared by the checks of one attempt; checks fill in what they load."""

    request: AdmissionRequest
    now: datetime
    decoded: Optional[DecodedToken] = None
    session: Optional[ClassSession] = None
