"""
Inkwell Backend: Password Hashing
=================================

What:  One-way salted hashing of user passwords with bcrypt.
How:   Every call to `hash_password` draws a fresh random salt
       (`bcrypt.gensalt`); the salt and cost factor are embedded in the
       resulting hash, so `verify_password` needs nothing else.
Who:   UserService (registration, direct creation, password change, login).

bcrypt is CPU-bound. The async wrappers run it on Starlette's thread pool
so a login does not stall the event loop.
"""

import bcrypt
from starlette.concurrency import run_in_threadpool

from app.exceptions import ValidationError

# bcrypt ignores (or, in newer releases, rejects) input past 72 bytes
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValidationError(
            message=f"Password must be at most {BCRYPT_MAX_BYTES} bytes",
            field="password",
        )
    return encoded


def hash_password(password: str, rounds: int = 10) -> str:
    """Return a bcrypt hash of `password` using a new random salt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check `password` against a stored bcrypt hash.

    A malformed stored hash, or a candidate longer than bcrypt can have
    hashed, counts as a mismatch rather than an error.
    """
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        return False


async def hash_password_async(password: str, rounds: int = 10) -> str:
    return await run_in_threadpool(hash_password, password, rounds)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await run_in_threadpool(verify_password, password, password_hash)
