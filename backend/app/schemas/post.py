"""
Inkwell Backend: Post, Comment & Category Schemas
=================================================

What:  API contract for posts and their relations, plus the `PostIncludes`
       flags that select which relations a post read composes.

Read composition:
    A post read performs one query for the posts and one extra query per
    requested relation. The result is a single aggregate:

        PostDetailResponse
        ├── post columns (id, title, content, user_id, timestamps)
        ├── user        (when with_user)
        ├── categories  (when with_categories)
        └── comments    (when with_comments)

    Relations that were not requested are returned as null.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.user import UserResponse


@dataclass(frozen=True)
class PostIncludes:
    """Which relations to load alongside a post."""
    with_user: bool = False
    with_categories: bool = False
    with_comments: bool = False

    @classmethod
    def all(cls) -> "PostIncludes":
        return cls(with_user=True, with_categories=True, with_comments=True)

    @classmethod
    def none(cls) -> "PostIncludes":
        return cls()


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(BaseModel):
    """Body of POST /posts. The owner comes from the token, never the body."""
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(default="", max_length=100_000)


class PostUpdate(BaseModel):
    """Body of PUT /posts/{id}. Only title and content can change."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, max_length=100_000)


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=10_000)


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CommentResponse(BaseModel):
    id: int
    content: str
    post_id: int
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CategoryResponse(BaseModel):
    id: int
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    """Post columns only; returned by create and update."""
    id: int
    title: str
    content: str
    user_id: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostDetailResponse(PostResponse):
    """Post with the relations selected by PostIncludes."""
    user: Optional[UserResponse] = None
    categories: Optional[List[CategoryResponse]] = None
    comments: Optional[List[CommentResponse]] = None
