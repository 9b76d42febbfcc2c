from __future__ import annotations

from typing import Optional

from ...common.datetime_utils import to_epoch_ms
from ...core.enums import RejectKind
from ...core.exceptions import MalformedTokenError
from ..admission import AdmissionContext, Rejection
from ..token import decode_token, freshness_rejection, token_age_ms
from .base import AdmissionCheck


class TokenFormatCheck(AdmissionCheck):
    def evaluate(self, ctx: AdmissionContext) -> Optional[Rejection]:
        try:
            ctx.decoded = decode_token(ctx.request.token or "")
        except MalformedTokenError as e:
            return Rejection(RejectKind.MALFORMED_TOKEN, str(e))
        return None


class SessionMatchCheck(AdmissionCheck):
    """Runs before freshness so a foreign token never reports a timing error."""

    def evaluate(self, ctx: AdmissionContext) -> Optional[Rejection]:
        if ctx.decoded is None or ctx.decoded.session_id != ctx.request.session_id:
            return Rejection(RejectKind.SESSION_MISMATCH, "Invalid QR code - session mismatch")
        return None


class TokenFreshnessCheck(AdmissionCheck):
    def __init__(self, *, max_age_ms: int, max_future_ms: int):
        self._max_age_ms = int(max_age_ms)
        self._max_future_ms = int(max_future_ms)

    def evaluate(self, ctx: AdmissionContext) -> Optional[Rejection]:
        now_ms = to_epoch_ms(ctx.now)
        minute = ctx.decoded.issued_minute
        kind = freshness_rejection(minute, now_ms, self._max_age_ms, self._max_future_ms)
        if kind is None:
            return None

        age_s = token_age_ms(minute, now_ms) // 1000
        if kind == RejectKind.TOKEN_EXPIRED:
            return Rejection(
                kind,
                f"QR code expired ({age_s}s old). Please scan the current QR code from the lecturer screen.",
            )
        return Rejection(
            kind,
            f"QR code is dated {-age_s}s in the future. Check the device clock and scan again.",
        )
