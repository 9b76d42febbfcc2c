"""Role based capability checks.

Kept free of any web framework so controllers, services and scripts share one
definition of who may do what.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from .enums import Role
from .exceptions import AuthorizationError


class Capability(str, Enum):
    MARK_OWN_ATTENDANCE = "mark_own_attendance"
    MARK_ANY_ATTENDANCE = "mark_any_attendance"
    MANAGE_SESSIONS = "manage_sessions"
    DISPLAY_SESSION_TOKEN = "display_session_token"
    VIEW_REPORTS = "view_reports"
    MANAGE_ENROLLMENTS = "manage_enrollments"


_LECTURER = frozenset(
    {
        Capability.MARK_ANY_ATTENDANCE,
        Capability.MANAGE_SESSIONS,
        Capability.DISPLAY_SESSION_TOKEN,
        Capability.VIEW_REPORTS,
    }
)

CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.STUDENT: frozenset({Capability.MARK_OWN_ATTENDANCE}),
    Role.LECTURER: _LECTURER,
    Role.ADMIN: _LECTURER | {Capability.MANAGE_ENROLLMENTS},
}


def _as_role(role: Union[Role, str, None]) -> Optional[Role]:
    if role is None or isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def can(role: Union[Role, str, None], capability: Capability) -> bool:
    r = _as_role(role)
    if r is None:
        return False
    return capability in CAPABILITIES.get(r, frozenset())


def require(role: Union[Role, str, None], capability: Capability) -> None:
    if not can(role, capability):
        raise AuthorizationError("You do not have permission to perform this action")
