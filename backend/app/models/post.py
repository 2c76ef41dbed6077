"""
Inkwell Backend: Post SQLAlchemy Model
======================================

What:  ORM model for the `posts` table.
Who:   Used by PostService for CRUD and relationship reads.

Ownership:
    `user_id` is captured from the authenticated identity when the post is
    created and is never written again; no update schema exposes it.

Relationships:
    - user:       many-to-one (owner)
    - categories: many-to-many through `post_categories`
    - comments:   one-to-many
    Collections are never lazy-loaded (async sessions cannot); PostService
    requests them explicitly with selectinload.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import utc_now

if TYPE_CHECKING:
    from app.models.category import Category
    from app.models.comment import Comment
    from app.models.user import User


class Post(Base):
    """A blog post owned by exactly one user."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owner; set once at creation",
    )

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
    user: Mapped["User"] = relationship(back_populates="posts")

    categories: Mapped[List["Category"]] = relationship(
        secondary="post_categories",
        back_populates="posts",
        passive_deletes=True,
        order_by="Category.id",
    )

    comments: Mapped[List["Comment"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.id",
    )

    __table_args__ = (
        Index("idx_posts_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, user_id={self.user_id}, title='{self.title}')>"
