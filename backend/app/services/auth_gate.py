"""
Inkwell Backend: Auth Gate
==========================

What:  Turns an `Authorization` header into a verified Identity, or rejects
       the request before any handler runs.
How:   Per-request state machine:

           NoToken ──(header has bearer token)──▶ TokenPresentUnverified
              │                                       │
              │                     TokenService.verify + user lookup
              ▼                                       │
           Rejected ◀──── failure ────────────────────┤
           (401 "No token provided")                  ▼
                                                   Verified ──▶ Identity
                           (401 "Invalid token" on any failure)

Who:   Wrapped by the `require_identity` FastAPI dependency (app.dependencies);
       handlers receive the Identity as an explicit argument.

No retries: the first failure ends the request with 401.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidTokenError, UnauthorizedError
from app.models.user import User
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer"


@dataclass(frozen=True)
class Identity:
    """The verified caller, passed to services instead of a request attribute."""
    user_id: int
    name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(user_id=user.id, name=user.name, email=user.email)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header value.

    Raises:
        UnauthorizedError:  header missing, empty, or "Bearer" with no token.
        InvalidTokenError:  a scheme other than Bearer.
    """
    if not authorization or not authorization.strip():
        raise UnauthorizedError("No token provided")

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_PREFIX:
        raise InvalidTokenError(reason="scheme")

    token = token.strip()
    if not token:
        raise UnauthorizedError("No token provided")
    return token


class AuthGate:
    """
    Resolves a request's bearer token to a stored user.

    Built once in create_app() around the process TokenService.
    """

    def __init__(self, token_service: TokenService):
        self.token_service = token_service

    async def authenticate(
        self, db: AsyncSession, authorization: Optional[str]
    ) -> Identity:
        """
        Run the gate for one request.

        Args:
            db:            Request-scoped session used for the user lookup.
            authorization: Raw `Authorization` header value (may be None).

        Returns:
            Identity of the verified caller.

        Raises:
            UnauthorizedError / InvalidTokenError: the request is rejected.
        """
        try:
            token = extract_bearer_token(authorization)
            user_id = self.token_service.verify(token)
        except UnauthorizedError as e:
            logger.info("Auth rejected: %s (%s)", e.message, e.context.get("reason", "no_token"))
            raise

        user = await db.get(User, user_id)
        if user is None:
            # Token outlived its user; there is no revocation list
            logger.info("Auth rejected: token subject %d no longer exists", user_id)
            raise InvalidTokenError(reason="unknown_subject")

        return Identity.from_user(user)
