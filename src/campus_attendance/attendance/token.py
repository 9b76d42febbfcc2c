"""Rotating proof token shown on the lecturer's screen.

Format: base64("<session_id>:<issued_minute>") where issued_minute is
floor(epoch_ms / 60000). The token is not signed; it only binds a scan to a
session and a recent minute.
"""
from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_epoch_ms
from ..core.constants import MS_PER_MINUTE
from ..core.enums import RejectKind
from ..core.exceptions import MalformedTokenError

# A minute since the epoch stays well under 12 digits.
_MINUTE_RE = re.compile(r"[0-9]{1,12}")


@dataclass(frozen=True)
class DecodedToken:
    session_id: str
    issued_minute: int

    @property
    def issued_at_ms(self) -> int:
        return self.issued_minute * MS_PER_MINUTE


def issued_minute(now: datetime) -> int:
    return to_epoch_ms(now) // MS_PER_MINUTE


def encode_token(session_id: str, minute: int) -> str:
    if not session_id or ":" in session_id:
        raise ValueError(f"Session id cannot be encoded in a token: {session_id!r}")
    if minute < 0:
        raise ValueError("Issued minute must not be negative")
    raw = f"{session_id}:{int(minute)}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_token(token: str) -> DecodedToken:
    try:
        raw = base64.b64decode((token or "").strip(), validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        # UnicodeDecodeError is a ValueError too.
        raise MalformedTokenError("Invalid QR code format - not a valid token") from e

    parts = raw.split(":")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedTokenError("Invalid QR code format - missing session ID or timestamp")
    if not _MINUTE_RE.fullmatch(parts[1]):
        raise MalformedTokenError("Invalid QR code format - timestamp is not a number")

    try:
        minute = int(parts[1])
    except ValueError as e:
        raise MalformedTokenError("Invalid QR code format - timestamp is not a number") from e

    return DecodedToken(session_id=parts[0], issued_minute=minute)


def token_age_ms(minute: int, now_ms: int) -> int:
    return now_ms - minute * MS_PER_MINUTE


def freshness_rejection(minute: int, now_ms: int, max_age_ms: int, max_future_ms: int) -> Optional[RejectKind]:
    age = token_age_ms(minute, now_ms)
    if age > max_age_ms:
        return RejectKind.TOKEN_EXPIRED
    if age < -max_future_ms:
        return RejectKind.TOKEN_FROM_FUTURE
    return None


def is_fresh(minute: int, now_ms: int, max_age_ms: int, max_future_ms: int) -> bool:
    return freshness_rejection(minute, now_ms, max_age_ms, max_future_ms) is None
