"""
Inkwell Backend: Post Route Handlers
====================================

What:  Posts and their comments/categories under /posts.
How:   Reads are public; writes declare `require_identity`, so the Auth Gate
       runs before the handler and hands it the caller's Identity.

Route table:
    GET    /posts                         public     200 [post + user/categories/comments]
    GET    /posts/{post_id}               public     200 post + relations
    POST   /posts                         Auth Gate  201 post
    PUT    /posts/{post_id}               Auth Gate  200 post     (owner only)
    DELETE /posts/{post_id}               Auth Gate  204          (owner only)
    GET    /posts/{post_id}/comments      public     200 [comment]
    POST   /posts/{post_id}/comments      Auth Gate  201 comment  (any user)
    GET    /posts/{post_id}/categories    public     200 [category]
    POST   /posts/{post_id}/categories    Auth Gate  201 category (owner only)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import require_identity
from app.schemas.common import ErrorResponse
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
from app.services.auth_gate import Identity
from app.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])

_NOT_FOUND = {404: {"description": "Post not found", "model": ErrorResponse}}
_UNAUTHORIZED = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}
_FORBIDDEN = {403: {"description": "Not the post owner", "model": ErrorResponse}}


# ── Posts ─────────────────────────────────────────────────────────────────


@router.get(
    "",
    response_model=List[PostDetailResponse],
    summary="List posts with their author, categories and comments",
)
async def list_posts(db: AsyncSession = Depends(get_db_session)) -> List[PostDetailResponse]:
    return await post_service.list_posts(db, PostIncludes.all())


@router.get(
    "/{post_id}",
    response_model=PostDetailResponse,
    responses=_NOT_FOUND,
    summary="Get one post with its author, categories and comments",
)
async def get_post(post_id: int, db: AsyncSession = Depends(get_db_session)) -> PostDetailResponse:
    return await post_service.get_post(db, post_id, PostIncludes.all())


@router.post(
    "",
    status_code=201,
    response_model=PostResponse,
    responses=_UNAUTHORIZED,
    summary="Create a post owned by the caller",
)
async def create_post(
    body: PostCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    post = await post_service.create_post(db, identity, body)
    return PostResponse.model_validate(post)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses={**_UNAUTHORIZED, **_FORBIDDEN, **_NOT_FOUND},
    summary="Update your own post",
)
async def update_post(
    post_id: int,
    body: PostUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    post = await post_service.update_post(db, identity, post_id, body)
    return PostResponse.model_validate(post)


@router.delete(
    "/{post_id}",
    status_code=204,
    response_class=Response,
    responses={**_UNAUTHORIZED, **_FORBIDDEN, **_NOT_FOUND},
    summary="Delete your own post",
)
async def delete_post(
    post_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await post_service.delete_post(db, identity, post_id)
    return Response(status_code=204)


# ── Comments ──────────────────────────────────────────────────────────────


@router.get(
    "/{post_id}/comments",
    response_model=List[CommentResponse],
    responses=_NOT_FOUND,
    summary="List comments on a post",
)
async def list_comments(
    post_id: int, db: AsyncSession = Depends(get_db_session)
) -> List[CommentResponse]:
    comments = await post_service.list_comments(db, post_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.post(
    "/{post_id}/comments",
    status_code=201,
    response_model=CommentResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Comment on a post",
)
async def create_comment(
    post_id: int,
    body: CommentCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    comment = await post_service.create_comment(db, identity, post_id, body)
    return CommentResponse.model_validate(comment)


# ── Categories ────────────────────────────────────────────────────────────


@router.get(
    "/{post_id}/categories",
    response_model=List[CategoryResponse],
    responses=_NOT_FOUND,
    summary="List categories of a post",
)
async def list_categories(
    post_id: int, db: AsyncSession = Depends(get_db_session)
) -> List[CategoryResponse]:
    categories = await post_service.list_categories(db, post_id)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post(
    "/{post_id}/categories",
    status_code=201,
    response_model=CategoryResponse,
    responses={**_UNAUTHORIZED, **_FORBIDDEN, **_NOT_FOUND},
    summary="Attach a new category to your own post",
)
async def create_category(
    post_id: int,
    body: CategoryCreate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CategoryResponse:
    category = await post_service.create_category(db, identity, post_id, body)
    return CategoryResponse.model_validate(category)
