"""
Inkwell Backend: User Route Handlers
====================================

What:  Registration, login, and user CRUD under /users.
How:   Thin handlers: parse the body, call UserService, issue tokens through
       the app's TokenService, return the response model.

Route table:
    POST   /users/register   public      201 {token}
    POST   /users/login      public      200 {token}
    POST   /users            public      201 user
    GET    /users            public      200 [user]
    GET    /users/{user_id}  Auth Gate   200 user    (self only)
    PUT    /users/{user_id}  Auth Gate   200 user    (self only)
    DELETE /users/{user_id}  Auth Gate   204         (self only)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_token_service, get_user_service, require_identity
from app.schemas.common import ErrorResponse
from app.schemas.user import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from app.services.auth_gate import Identity
from app.services.token_service import TokenService
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

_PROTECTED_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not your account", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
}


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    responses={400: {"description": "Invalid input or user already exists", "model": ErrorResponse}},
    summary="Register a new user and receive a token",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    user = await user_service.register(db, name=body.name, email=body.email, password=body.password)
    return TokenResponse(token=tokens.issue(user.id))


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={400: {"description": "Invalid input or credentials", "model": ErrorResponse}},
    summary="Exchange email and password for a token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    user = await user_service.authenticate(db, email=body.email, password=body.password)
    return TokenResponse(token=tokens.issue(user.id))


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    responses={400: {"description": "Invalid input or user already exists", "model": ErrorResponse}},
    summary="Create a user directly",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await user_service.create_user(db, body)
    return UserResponse.model_validate(user)


@router.get("", response_model=List[UserResponse], summary="List all users")
async def list_users(
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> List[UserResponse]:
    users = await user_service.list_users(db)
    return [UserResponse.model_validate(u) for u in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses=_PROTECTED_ERRORS,
    summary="Get your own user record",
)
async def get_user(
    user_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await user_service.get_user(db, identity, user_id)
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses=_PROTECTED_ERRORS,
    summary="Update your own user record",
)
async def update_user(
    user_id: int,
    body: UserUpdate,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await user_service.update_user(db, identity, user_id, body)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=204,
    response_class=Response,
    responses=_PROTECTED_ERRORS,
    summary="Delete your own user record",
)
async def delete_user(
    user_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> Response:
    await user_service.delete_user(db, identity, user_id)
    return Response(status_code=204)
