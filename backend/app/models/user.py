"""
Inkwell Backend: User SQLAlchemy Model
======================================

What:  ORM model for the `users` table: the identity record behind every token.
Who:   Used by UserService (credential store, self-service CRUD) and the
       Auth Gate (resolving a token subject to a stored user).

Table Design:
    - email: UNIQUE; the login handle. Duplicate registration is rejected in
      the service layer before the constraint is hit.
    - password: bcrypt hash including its salt. Plaintext is never stored.
    - posts / comments: ON DELETE CASCADE in the database; the ORM relationships
      use passive_deletes so deleting a user does not load its collections.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.comment import Comment
    from app.models.post import Post


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered author.

    Lifecycle:
        1. Created by POST /users/register or POST /users (password hashed)
        2. Read/updated/deleted only by the same identity (self-service)
        3. Deleting a user removes their posts and comments
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login handle, unique across users",
    )

    # bcrypt output is 60 chars; 255 leaves room for a future scheme
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Salted bcrypt hash; never plaintext",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # ── Relationships ─────────────────────────────────────────────────────
    posts: Mapped[List["Post"]] = relationship(
        back_populates="user",
        passive_deletes=True,
    )
    comments: Mapped[List["Comment"]] = relationship(
        back_populates="user",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        # No password, hashed or not, in debug output
        return f"<User(id={self.id}, email='{self.email}')>"
