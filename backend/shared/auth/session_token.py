"""HMAC-SHA256 signed session tokens.

Login issues a token bound to an account id; every protected request
presents it as ``Authorization: Bearer <token>``. Tokens are stateless:
the server keeps no record of them and expiry is the only way they end.

Token format: base64url(json_payload_bytes).base64url(hmac_sha256_signature)
"""

import base64
import binascii
import hashlib
import hmac
import json
import math
import time
from dataclasses import asdict, dataclass

import structlog

from shared.auth.errors import InvalidTokenError

logger = structlog.get_logger()

_TOKEN_PARTS = 2  # base64url(payload).base64url(signature)

TOKEN_TTL_SECONDS = 7 * 24 * 3600  # 7 days
CLOCK_SKEW_SECONDS = 60

_INVALID_TOKEN_MESSAGE = "Invalid token"


@dataclass(frozen=True)
class SessionToken:
    """Payload carried inside a signed session token."""

    account_id: str
    issued_at: float
    expires_at: float


def sign_session_token(token: SessionToken, secret: str) -> str:
    """Serialize the payload to JSON, compute HMAC-SHA256, return base64url(payload).base64url(sig)."""
    payload_bytes = json.dumps(asdict(token), sort_keys=True).encode()
    sig = hmac.new(secret.encode(), payload_bytes, hashlib.sha256).digest()
    payload_b64 = base64.urlsafe_b64encode(payload_bytes).decode()
    sig_b64 = base64.urlsafe_b64encode(sig).decode()
    return f"{payload_b64}.{sig_b64}"


def verify_session_token(token: str, secret: str, *, now: float | None = None) -> SessionToken:
    """Verify signature, payload shape and expiry. Raises InvalidTokenError on any failure."""
    parts = token.split(".")
    if len(parts) != _TOKEN_PARTS:
        raise InvalidTokenError(_INVALID_TOKEN_MESSAGE)

    try:
        payload_bytes = base64.urlsafe_b64decode(parts[0])
        provided_sig = base64.urlsafe_b64decode(parts[1])
    except (ValueError, binascii.Error) as exc:
        raise InvalidTokenError(_INVALID_TOKEN_MESSAGE) from exc

    expected_sig = hmac.new(secret.encode(), payload_bytes, hashlib.sha256).digest()
    if not hmac.compare_digest(provided_sig, expected_sig):
        logger.debug("session token signature mismatch")
        raise InvalidTokenError(_INVALID_TOKEN_MESSAGE)

    try:
        data = json.loads(payload_bytes)
        session_token = SessionToken(**data)
    except (json.JSONDecodeError, TypeError, KeyError) as exc:
        logger.debug("session token malformed payload")
        raise InvalidTokenError(_INVALID_TOKEN_MESSAGE) from exc

    if not isinstance(session_token.account_id, str) or not session_token.account_id:
        logger.debug("session token missing account id")
        raise InvalidTokenError(_INVALID_TOKEN_MESSAGE)

    reason = _timestamp_problem(session_token, time.time() if now is None else now)
    if reason is not None:
        logger.debug("session token rejected", reason=reason)
        raise InvalidTokenError(_INVALID_TOKEN_MESSAGE)

    return session_token


def _timestamp_problem(token: SessionToken, now: float) -> str | None:
    """Return why the token's time window is unacceptable, or None when it is fine."""
    stamps = (token.issued_at, token.expires_at)
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v) for v in stamps):
        return "bad timestamp"
    if token.issued_at - CLOCK_SKEW_SECONDS > now:
        return "not yet valid"
    if not 0 < token.expires_at - token.issued_at <= TOKEN_TTL_SECONDS + CLOCK_SKEW_SECONDS:
        return "bad lifetime"
    if token.expires_at < now:
        return "expired"
    return None


class SessionTokenIssuer:
    """Issue and verify session tokens with one server-held secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Session token secret must not be empty")
        self._secret = secret

    def issue(self, account_id: str, *, now: float | None = None) -> str:
        """Return a signed token for the account, valid for TOKEN_TTL_SECONDS."""
        issued_at = time.time() if now is None else now
        token = SessionToken(
            account_id=account_id,
            issued_at=issued_at,
            expires_at=issued_at + TOKEN_TTL_SECONDS,
        )
        return sign_session_token(token, self._secret)

    def verify(self, token: str, *, now: float | None = None) -> SessionToken:
        return verify_session_token(token, self._secret, now=now)
