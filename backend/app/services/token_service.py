"""
Inkwell Backend: Token Service
==============================

What:  Issues and verifies signed, time-limited bearer tokens.
How:   HS256 JSON Web Tokens via PyJWT. A token carries the identity id
       (`sub`, as a string), the issue time (`iat`) and an absolute expiry
       (`exp`) exactly `jwt_expires_seconds` (default one hour) after issue.
Who:   Constructed once by create_app() from an explicit Settings object and
       stored on `app.state`; used by the users routes (issue) and the
       Auth Gate (verify).

Token lifecycle:
    issue(42) ──▶ "eyJhbGciOi..." ──▶ verify() ──▶ 42
                                    │
                                    ├─ bad signature  ─▶ InvalidTokenError
                                    ├─ malformed      ─▶ InvalidTokenError
                                    ├─ missing claims ─▶ InvalidTokenError
                                    └─ expired        ─▶ InvalidTokenError

There is no revocation list. A token stays valid until it expires, even if
the user is deleted; the Auth Gate catches that case when it resolves the
subject to a stored user.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from app.config import Settings
from app.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


class TokenService:
    """
    Stateless signer/verifier bound to one secret.

    The secret is read from the Settings object passed in; nothing here
    touches the process environment.
    """

    def __init__(self, config: Settings):
        if not config.jwt_secret_key:
            raise ValueError("TokenService requires a non-empty jwt_secret_key")
        self._secret = config.jwt_secret_key
        self._algorithm = config.jwt_algorithm
        self.expires_in = timedelta(seconds=config.jwt_expires_seconds)

    def issue(self, identity_id: int, issued_at: Optional[datetime] = None) -> str:
        """
        Create a token for `identity_id`.

        Args:
            identity_id: User primary key to embed as the subject.
            issued_at:   Issue time; defaults to now (UTC).

        Returns:
            The encoded token string.
        """
        now = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": str(identity_id),
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> int:
        """
        Validate `token` and return the embedded identity id.

        Raises:
            InvalidTokenError: signature mismatch, malformed token, missing
                or non-integer subject, or expiry in the past.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError(reason="expired")
        except jwt.InvalidTokenError as e:
            logger.debug("Token rejected: %s", type(e).__name__)
            raise InvalidTokenError(reason="invalid")

        try:
            return int(payload["sub"])
        except (TypeError, ValueError):
            raise InvalidTokenError(reason="bad_subject")
