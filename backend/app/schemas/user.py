"""
Inkwell Backend: User & Credential Schemas
==========================================

What:  Request bodies for registration, login and user CRUD; the token and
       user response models.
How:   Field rules mirror the registration checks: name required, valid
       email, password of 6 or more characters. Passwords are capped at 72
       characters because bcrypt only reads the first 72 bytes.

UserResponse deliberately has no password field, so even the hash never
leaves the server.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 72


def _strip_name(v: str) -> str:
    stripped = v.strip()
    if not stripped:
        raise ValueError("Name is required")
    return stripped


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """Body of POST /users/register."""
    name: str = Field(min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(description="Login email (unique)")
    password: str = Field(
        min_length=PASSWORD_MIN_LENGTH,
        max_length=PASSWORD_MAX_LENGTH,
        description="Plaintext password; hashed before storage",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_name(v)


class LoginRequest(BaseModel):
    """Body of POST /users/login."""
    email: EmailStr
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)


class UserCreate(RegisterRequest):
    """
    Body of POST /users (direct creation without a token in the response).

    Same rules as registration; the password is hashed the same way.
    """


class UserUpdate(BaseModel):
    """
    Body of PUT /users/{id}. All fields optional; omitted fields are unchanged.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(
        default=None,
        min_length=PASSWORD_MIN_LENGTH,
        max_length=PASSWORD_MAX_LENGTH,
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _strip_name(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TokenResponse(BaseModel):
    """Returned by register (201) and login (200)."""
    token: str = Field(description="Signed bearer token, valid for one hour")


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
