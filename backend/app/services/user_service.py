"""
Inkwell Backend: User Service (Credential Store + Self-Service CRUD)
====================================================================

What:  Registration, login verification, and user CRUD restricted to the
       owning identity.
How:   Async SQLAlchemy queries on the request session; passwords go through
       app.services.passwords; ownership is checked against the explicit
       Identity the Auth Gate produced.
Who:   Called by the /users route handlers.

Lookup policy for /users/{id}:
    1. Load the target. Missing → NotFoundError, stop.
    2. Target id ≠ caller id → ForbiddenError, stop.
    3. Read / update / delete.
    A missing target never falls through to the ownership check or the
    mutation.

Error Handling Strategy:
    Domain errors (Conflict, NotFound, Forbidden, InvalidCredentials) propagate
    as-is. SQLAlchemy errors are logged and wrapped in DatabaseError so the
    client only ever sees a generic 500 message.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
)
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate
from app.services.auth_gate import Identity
from app.services.passwords import hash_password_async, verify_password_async

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """
    Business logic for users.

    Built once per app by create_app() from Settings.bcrypt_rounds and
    reached through the get_user_service dependency.

    Args:
        bcrypt_rounds: Cost factor for new password hashes.
    """

    def __init__(self, bcrypt_rounds: int = 10):
        self.bcrypt_rounds = bcrypt_rounds

    # ── Credential Store ──────────────────────────────────────────────────

    async def register(self, db: AsyncSession, name: str, email: str, password: str) -> User:
        """
        Create a new identity with a salted password hash.

        Raises:
            ConflictError: a user with this email already exists.
            DatabaseError: the insert failed.
        """
        email = normalize_email(email)
        await self._ensure_email_free(db, email)

        password_hash = await hash_password_async(password, self.bcrypt_rounds)
        user = User(name=name, email=email, password=password_hash)
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError()
        except SQLAlchemyError as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User registered: id=%d", user.id)
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Verify an email/password pair.

        Unknown email and wrong password raise the same InvalidCredentialsError.
        """
        user = await self._find_by_email(db, normalize_email(email))
        if user is None:
            logger.info("Login failed: unknown email")
            raise InvalidCredentialsError()

        if not await verify_password_async(password, user.password):
            logger.info("Login failed: bad password for user %d", user.id)
            raise InvalidCredentialsError()

        logger.info("User logged in: id=%d", user.id)
        return user

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def create_user(self, db: AsyncSession, data: UserCreate) -> User:
        """Direct creation (POST /users); same hashing and uniqueness rules as register."""
        return await self.register(db, name=data.name, email=data.email, password=data.password)

    async def list_users(self, db: AsyncSession) -> List[User]:
        try:
            result = await db.execute(select(User).order_by(User.id))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_user(self, db: AsyncSession, identity: Identity, user_id: int) -> User:
        """Read a user; only the user themself may do so."""
        return await self._load_owned(db, identity, user_id)

    async def update_user(
        self, db: AsyncSession, identity: Identity, user_id: int, data: UserUpdate
    ) -> User:
        """
        Apply the provided fields to the caller's own record.

        Raises:
            NotFoundError / ForbiddenError: see lookup policy above.
            ConflictError: the new email belongs to another user.
        """
        user = await self._load_owned(db, identity, user_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            new_email = normalize_email(changes["email"])
            if new_email != user.email:
                await self._ensure_email_free(db, new_email)
            user.email = new_email
        if "name" in changes:
            user.name = changes["name"]
        if "password" in changes:
            user.password = await hash_password_async(changes["password"], self.bcrypt_rounds)

        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError()
        except SQLAlchemyError as e:
            logger.error("Database error updating user %d: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the user. Please try again.",
                context={"user_id": user_id},
            )

        logger.info("User updated: id=%d fields=%s", user_id, sorted(changes))
        return user

    async def delete_user(self, db: AsyncSession, identity: Identity, user_id: int) -> None:
        """Delete the caller's own record; posts and comments cascade."""
        user = await self._load_owned(db, identity, user_id)
        try:
            await db.delete(user)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %d: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the user. Please try again.",
                context={"user_id": user_id},
            )
        logger.info("User deleted: id=%d", user_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _load_owned(self, db: AsyncSession, identity: Identity, user_id: int) -> User:
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %d: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"user_id": user_id},
            )

        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        if user.id != identity.user_id:
            logger.warning(
                "User %d denied access to user %d", identity.user_id, user_id
            )
            raise ForbiddenError()
        return user

    async def _find_by_email(self, db: AsyncSession, email: str):
        try:
            result = await db.execute(select(User).where(func.lower(User.email) == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not look up the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _ensure_email_free(self, db: AsyncSession, email: str) -> None:
        if await self._find_by_email(db, email) is not None:
            raise ConflictError()
