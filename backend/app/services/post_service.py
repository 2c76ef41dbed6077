"""
Inkwell Backend: Post Service (Posts, Comments, Categories)
===========================================================

What:  CRUD for posts and creation/listing of their comments and categories,
       with ownership enforced against the caller's Identity.
Who:   Called by the /posts route handlers.

Ownership rules:
    ┌───────────────────────────┬────────────────────────────────────────┐
    │ Operation                 │ Rule                                   │
    ├───────────────────────────┼────────────────────────────────────────┤
    │ create post               │ any identity; becomes the owner        │
    │ update / delete post      │ owner only (403 otherwise, no change)  │
    │ create comment            │ any identity; post must exist          │
    │ create category           │ post owner only; post must exist       │
    │ reads                     │ public                                 │
    └───────────────────────────┴────────────────────────────────────────┘

    A missing post is always reported as NotFoundError before any ownership
    comparison is made.

Read composition:
    `PostIncludes` flags map to one selectinload option each, so a read costs
    one query for the posts plus one per requested relation.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import DatabaseError, ForbiddenError, NotFoundError
from app.models.category import Category, PostCategory
from app.models.comment import Comment
from app.models.post import Post
from app.schemas.post import (
    CategoryCreate,
    CategoryResponse,
    CommentCreate,
    CommentResponse,
    PostCreate,
    PostDetailResponse,
    PostIncludes,
    PostResponse,
    PostUpdate,
)
from app.schemas.user import UserResponse
from app.services.auth_gate import Identity

logger = logging.getLogger(__name__)


def _load_options(include: PostIncludes) -> list:
    options = []
    if include.with_user:
        options.append(selectinload(Post.user))
    if include.with_categories:
        options.append(selectinload(Post.categories))
    if include.with_comments:
        options.append(selectinload(Post.comments))
    return options


def compose_post(post: Post, include: PostIncludes) -> PostDetailResponse:
    """
    Build the aggregate response from a post whose requested relations are
    already loaded. Unrequested relations stay None and are never touched.
    """
    data = PostResponse.model_validate(post).model_dump()
    if include.with_user:
        data["user"] = UserResponse.model_validate(post.user)
    if include.with_categories:
        data["categories"] = [CategoryResponse.model_validate(c) for c in post.categories]
    if include.with_comments:
        data["comments"] = [CommentResponse.model_validate(c) for c in post.comments]
    return PostDetailResponse(**data)


class PostService:
    """Business logic for posts and their relations."""

    # ── Posts ─────────────────────────────────────────────────────────────

    async def create_post(self, db: AsyncSession, identity: Identity, data: PostCreate) -> Post:
        """Persist a new post owned by the caller."""
        post = Post(title=data.title, content=data.content, user_id=identity.user_id)
        db.add(post)
        await self._flush(db, "create post")
        logger.info("Post created: id=%d owner=%d", post.id, identity.user_id)
        return post

    async def list_posts(
        self, db: AsyncSession, include: Optional[PostIncludes] = None
    ) -> List[PostDetailResponse]:
        """All posts, oldest first, with the requested relations."""
        include = include or PostIncludes.all()
        try:
            result = await db.execute(
                select(Post)
                .options(*_load_options(include))
                .order_by(Post.id)
                .execution_options(populate_existing=True)
            )
            posts = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to retrieve posts",
                context={"error_type": type(e).__name__},
            )
        return [compose_post(post, include) for post in posts]

    async def get_post(
        self, db: AsyncSession, post_id: int, include: Optional[PostIncludes] = None
    ) -> PostDetailResponse:
        """
        One post with the requested relations.

        Raises:
            NotFoundError: no post with this id.
        """
        include = include or PostIncludes.all()
        post = await self._find(db, post_id, include)
        return compose_post(post, include)

    async def update_post(
        self, db: AsyncSession, identity: Identity, post_id: int, data: PostUpdate
    ) -> Post:
        """
        Change title/content of the caller's own post.

        Raises:
            NotFoundError:  no post with this id.
            ForbiddenError: caller is not the owner; nothing is written.
        """
        post = await self._find_owned(db, identity, post_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(post, field, value)
        await self._flush(db, "update post")

        logger.info("Post updated: id=%d fields=%s", post_id, sorted(changes))
        return post

    async def delete_post(self, db: AsyncSession, identity: Identity, post_id: int) -> None:
        """Remove the caller's own post; comments and join rows cascade."""
        post = await self._find_owned(db, identity, post_id)
        try:
            await db.delete(post)
        except SQLAlchemyError as e:
            logger.error("Database error deleting post %d: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete post", context={"post_id": post_id})
        await self._flush(db, "delete post")
        logger.info("Post deleted: id=%d", post_id)

    # ── Comments ──────────────────────────────────────────────────────────

    async def list_comments(self, db: AsyncSession, post_id: int) -> List[Comment]:
        post = await self._find(db, post_id, PostIncludes(with_comments=True))
        return list(post.comments)

    async def create_comment(
        self, db: AsyncSession, identity: Identity, post_id: int, data: CommentCreate
    ) -> Comment:
        """Any authenticated user may comment on an existing post."""
        post = await self._find(db, post_id, PostIncludes.none())
        comment = Comment(content=data.content, post_id=post.id, user_id=identity.user_id)
        db.add(comment)
        await self._flush(db, "create comment")
        logger.info("Comment created: id=%d post=%d author=%d", comment.id, post.id, identity.user_id)
        return comment

    # ── Categories ────────────────────────────────────────────────────────

    async def list_categories(self, db: AsyncSession, post_id: int) -> List[Category]:
        post = await self._find(db, post_id, PostIncludes(with_categories=True))
        return list(post.categories)

    async def create_category(
        self, db: AsyncSession, identity: Identity, post_id: int, data: CategoryCreate
    ) -> Category:
        """
        Create a category and attach it to the caller's own post.

        The ownership check runs before anything is added to the session, so
        a ForbiddenError leaves neither a category nor a join row behind.
        """
        post = await self._find_owned(db, identity, post_id)

        category = Category(name=data.name)
        db.add(category)
        await self._flush(db, "create category")

        db.add(PostCategory(post_id=post.id, category_id=category.id))
        await self._flush(db, "attach category")

        logger.info("Category created: id=%d post=%d", category.id, post.id)
        return category

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find(self, db: AsyncSession, post_id: int, include: PostIncludes) -> Post:
        try:
            result = await db.execute(
                select(Post)
                .where(Post.id == post_id)
                .options(*_load_options(include))
                .execution_options(populate_existing=True)
            )
            post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %d: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to retrieve post",
                context={"post_id": post_id},
            )

        if post is None:
            raise NotFoundError(resource="post", resource_id=post_id)
        return post

    async def _find_owned(self, db: AsyncSession, identity: Identity, post_id: int) -> Post:
        post = await self._find(db, post_id, PostIncludes.none())
        if post.user_id != identity.user_id:
            logger.warning(
                "User %d denied write access to post %d (owner %d)",
                identity.user_id,
                post_id,
                post.user_id,
            )
            raise ForbiddenError()
        return post

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Failed to {action}",
                context={"error_type": type(e).__name__},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless; shared by all requests
post_service = PostService()
