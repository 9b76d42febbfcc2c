from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    LECTURER = "lecturer"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class AttendanceMethod(str, Enum):
    QR_CODE = "qr_code"
    FACIAL_RECOGNITION = "facial_recognition"
    MANUAL = "manual"
    # Only written by session closing, never accepted from clients.
    AUTO = "auto"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    DROPPED = "dropped"
    COMPLETED = "completed"


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionTimeStatus(str, Enum):
    """Where 'now' sits relative to a session's scheduled window."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class RejectKind(str, Enum):
    """Reasons an attendance attempt is refused."""

    MALFORMED_TOKEN = "MalformedToken"
    SESSION_MISMATCH = "SessionMismatch"
    TOKEN_EXPIRED = "TokenExpired"
    TOKEN_FROM_FUTURE = "TokenFromFuture"
    SESSION_NOT_FOUND = "SessionNotFound"
    OUTSIDE_WINDOW = "OutsideWindow"
    NOT_ENROLLED = "NotEnrolled"
    ALREADY_MARKED = "AlreadyMarked"
    PERSISTENCE_ERROR = "PersistenceError"
