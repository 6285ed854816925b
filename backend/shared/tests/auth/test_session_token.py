"""Tests for HMAC-SHA256 session token signing and verification."""

import base64
import hashlib
import hmac
import json
import time

import pytest
from structlog.testing import capture_logs

from shared.auth.errors import InvalidTokenError
from shared.auth.session_token import (
    CLOCK_SKEW_SECONDS,
    TOKEN_TTL_SECONDS,
    SessionToken,
    SessionTokenIssuer,
    sign_session_token,
    verify_session_token,
)

SECRET = "test-hmac-secret"


def _make_token(
    account_id: str = "user-123",
    issued_at: float | None = None,
    expires_at: float | None = None,
) -> SessionToken:
    now = time.time()
    return SessionToken(
        account_id=account_id,
        issued_at=issued_at if issued_at is not None else now,
        expires_at=expires_at if expires_at is not None else now + TOKEN_TTL_SECONDS,
    )


def _sign_raw_payload(payload: dict) -> str:
    """Sign an arbitrary payload dict, bypassing SessionToken construction."""
    payload_bytes = json.dumps(payload, sort_keys=True).encode()
    sig = hmac.new(SECRET.encode(), payload_bytes, hashlib.sha256).digest()
    payload_b64 = base64.urlsafe_b64encode(payload_bytes).decode()
    sig_b64 = base64.urlsafe_b64encode(sig).decode()
    return f"{payload_b64}.{sig_b64}"


class TestSessionTokenIssuer:
    def test_issued_token_verifies_to_account_id(self):
        issuer = SessionTokenIssuer(SECRET)
        token = issuer.issue("user-123")
        assert issuer.verify(token).account_id == "user-123"

    def test_lifetime_is_seven_days(self):
        issuer = SessionTokenIssuer(SECRET)
        decoded = issuer.verify(issuer.issue("u1", now=1000.0), now=1000.0)
        assert decoded.issued_at == 1000.0
        assert decoded.expires_at == 1000.0 + 7 * 24 * 3600

    def test_valid_until_expiry_inclusive(self):
        issuer = SessionTokenIssuer(SECRET)
        token = issuer.issue("u1", now=1000.0)
        assert issuer.verify(token, now=1000.0 + TOKEN_TTL_SECONDS).account_id == "u1"

    def test_rejected_after_expiry(self):
        issuer = SessionTokenIssuer(SECRET)
        token = issuer.issue("u1", now=1000.0)
        with pytest.raises(InvalidTokenError, match="Invalid token"):
            issuer.verify(token, now=1000.0 + TOKEN_TTL_SECONDS + 1)

    def test_other_issuer_rejects_token(self):
        token = SessionTokenIssuer(SECRET).issue("u1")
        with pytest.raises(InvalidTokenError):
            SessionTokenIssuer("another-secret").verify(token)

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError, match="must not be empty"):
            SessionTokenIssuer("")


class TestTamperedToken:
    def test_tampered_payload_rejected(self):
        token = sign_session_token(_make_token(), SECRET)
        payload_b64, sig_b64 = token.split(".")
        payload = json.loads(base64.urlsafe_b64decode(payload_b64))
        payload["account_id"] = "someone-else"
        tampered_payload = base64.urlsafe_b64encode(json.dumps(payload, sort_keys=True).encode()).decode()
        with pytest.raises(InvalidTokenError):
            verify_session_token(f"{tampered_payload}.{sig_b64}", SECRET)

    def test_tampered_signature_rejected(self):
        token = sign_session_token(_make_token(), SECRET)
        payload_b64, sig_b64 = token.split(".")
        sig_bytes = bytearray(base64.urlsafe_b64decode(sig_b64))
        sig_bytes[0] ^= 0xFF
        tampered_sig = base64.urlsafe_b64encode(bytes(sig_bytes)).decode()
        with pytest.raises(InvalidTokenError):
            verify_session_token(f"{payload_b64}.{tampered_sig}", SECRET)


class TestMalformedToken:
    @pytest.mark.parametrize("token", ["nodot", "a.b.c", "!!!invalid.AAAA", ""])
    def test_bad_structure_rejected(self, token):
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)

    def test_signed_payload_missing_fields(self):
        with pytest.raises(InvalidTokenError):
            verify_session_token(_sign_raw_payload({"account_id": "x"}), SECRET)

    def test_signed_payload_with_unknown_fields(self):
        now = time.time()
        token = _sign_raw_payload(
            {"account_id": "u1", "issued_at": now, "expires_at": now + 60, "role": "admin"},
        )
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)

    def test_empty_account_id_rejected(self):
        now = time.time()
        token = _sign_raw_payload({"account_id": "", "issued_at": now, "expires_at": now + 60})
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)

    def test_non_numeric_expires_at_rejected(self):
        token = _sign_raw_payload({"account_id": "u1", "issued_at": time.time(), "expires_at": "later"})
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)


class TestTemporalValidation:
    def test_future_issued_token_rejected(self):
        future = time.time() + CLOCK_SKEW_SECONDS + 100
        token = sign_session_token(_make_token(issued_at=future, expires_at=future + 3600), SECRET)
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)

    def test_clock_skew_tolerance_accepted(self):
        slight_future = time.time() + CLOCK_SKEW_SECONDS - 1
        token = sign_session_token(_make_token(issued_at=slight_future, expires_at=slight_future + 3600), SECRET)
        assert verify_session_token(token, SECRET).account_id == "user-123"

    def test_expires_at_equal_to_issued_at_rejected(self):
        now = time.time()
        token = sign_session_token(_make_token(issued_at=now, expires_at=now), SECRET)
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)

    def test_overlong_lifetime_rejected(self):
        now = time.time()
        token = sign_session_token(
            _make_token(issued_at=now, expires_at=now + TOKEN_TTL_SECONDS + CLOCK_SKEW_SECONDS + 1),
            SECRET,
        )
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)

    def test_nan_issued_at_rejected(self):
        token = _sign_raw_payload({"account_id": "u1", "issued_at": float("nan"), "expires_at": time.time() + 60})
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)

    def test_boolean_timestamp_rejected(self):
        token = _sign_raw_payload({"account_id": "u1", "issued_at": True, "expires_at": time.time() + 60})
        with pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET)

    @pytest.mark.parametrize(
        ("issued_offset", "expires_offset", "reason"),
        [
            (-TOKEN_TTL_SECONDS - 10, -10, "expired"),
            (CLOCK_SKEW_SECONDS + 10, CLOCK_SKEW_SECONDS + 20, "not yet valid"),
            (0, 0, "bad lifetime"),
        ],
    )
    def test_rejection_reason_is_logged(self, issued_offset, expires_offset, reason):
        now = 1_000_000.0
        token = sign_session_token(
            _make_token(issued_at=now + issued_offset, expires_at=now + expires_offset),
            SECRET,
        )
        with capture_logs() as logs, pytest.raises(InvalidTokenError):
            verify_session_token(token, SECRET, now=now)

        assert {"event": "session token rejected", "reason": reason, "log_level": "debug"} in logs
