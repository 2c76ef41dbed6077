"""
Inkwell Backend: Token Service Unit Tests
=========================================

What:  Tests for issuing and verifying signed bearer tokens.
How:   Real PyJWT encode/decode with the test secret; no database needed.

What we test:
    ✅ Round trip returns the embedded user id
    ✅ Expiry is exactly one hour after issue
    ✅ Expired, tampered, malformed and foreign-secret tokens are rejected
    ✅ Subjects that are not user ids are rejected
    ✅ An empty secret is a configuration error
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.config import Settings
from app.exceptions import InvalidTokenError
from app.services.token_service import TokenService


class TestTokenIssue:
    """Tests for TokenService.issue()."""

    def test_round_trip_returns_identity_id(self, token_service):
        token = token_service.issue(42)
        assert token_service.verify(token) == 42

    def test_claims_expire_one_hour_after_issue(self, token_service, test_settings):
        """exp - iat is exactly the configured lifetime (3600s by default)."""
        token = token_service.issue(7)
        payload = jwt.decode(
            token, test_settings.jwt_secret_key, algorithms=[test_settings.jwt_algorithm]
        )
        assert payload["sub"] == "7"
        assert payload["exp"] - payload["iat"] == 3600

    def test_tokens_for_different_users_differ(self, token_service):
        assert token_service.issue(1) != token_service.issue(2)


class TestTokenVerify:
    """Tests for TokenService.verify() rejections."""

    def test_expired_token_rejected(self, token_service):
        issued = datetime.now(timezone.utc) - timedelta(hours=1, seconds=5)
        token = token_service.issue(1, issued_at=issued)

        with pytest.raises(InvalidTokenError) as exc_info:
            token_service.verify(token)
        assert exc_info.value.context["reason"] == "expired"
        assert exc_info.value.message == "Invalid token"

    def test_token_just_inside_lifetime_accepted(self, token_service):
        issued = datetime.now(timezone.utc) - timedelta(minutes=59)
        token = token_service.issue(3, issued_at=issued)
        assert token_service.verify(token) == 3

    def test_tampered_payload_rejected(self, token_service):
        """Swapping in another token's payload breaks the signature."""
        header, _, signature = token_service.issue(1).split(".")
        _, other_payload, _ = token_service.issue(2).split(".")

        with pytest.raises(InvalidTokenError) as exc_info:
            token_service.verify(f"{header}.{other_payload}.{signature}")
        assert exc_info.value.context["reason"] == "invalid"

    @pytest.mark.parametrize("token", ["not-a-token", "a.b.c", ""])
    def test_malformed_token_rejected(self, token_service, token):
        with pytest.raises(InvalidTokenError):
            token_service.verify(token)

    def test_token_signed_with_other_secret_rejected(self, token_service):
        other = TokenService(Settings(jwt_secret_key="a-completely-different-secret-value!!"))
        with pytest.raises(InvalidTokenError):
            token_service.verify(other.issue(1))

    def test_non_integer_subject_rejected(self, token_service, test_settings):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "ann", "iat": now, "exp": now + timedelta(hours=1)},
            test_settings.jwt_secret_key,
            algorithm=test_settings.jwt_algorithm,
        )
        with pytest.raises(InvalidTokenError) as exc_info:
            token_service.verify(token)
        assert exc_info.value.context["reason"] == "bad_subject"

    def test_missing_subject_rejected(self, token_service, test_settings):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iat": now, "exp": now + timedelta(hours=1)},
            test_settings.jwt_secret_key,
            algorithm=test_settings.jwt_algorithm,
        )
        with pytest.raises(InvalidTokenError) as exc_info:
            token_service.verify(token)
        assert exc_info.value.context["reason"] == "invalid"


class TestTokenServiceConfig:
    """Construction from Settings."""

    def test_empty_secret_raises(self):
        with pytest.raises(ValueError):
            TokenService(Settings(jwt_secret_key=""))

    def test_custom_lifetime_is_honored(self):
        service = TokenService(
            Settings(jwt_secret_key="another-secret-long-enough-for-hs256", jwt_expires_seconds=120)
        )
        assert service.expires_in == timedelta(seconds=120)
