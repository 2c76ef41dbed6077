"""
Inkwell Backend: FastAPI Dependencies
=====================================

What:  Request-scoped wiring between routes and the process-wide components
       that create_app() put on `app.state`.
How:   `require_identity` is the Auth Gate as a dependency: a route that
       declares it gets a verified Identity argument, or the request ends
       with 401 before the handler body runs.

    @router.post("/posts")
    async def create_post(identity: Identity = Depends(require_identity)): ...
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.services.auth_gate import AuthGate, Identity
from app.services.token_service import TokenService
from app.services.user_service import UserService


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


async def require_identity(
    authorization: Optional[str] = Header(default=None),
    auth_gate: AuthGate = Depends(get_auth_gate),
    db: AsyncSession = Depends(get_db_session),
) -> Identity:
    """Resolve the caller's identity or reject the request with 401."""
    return await auth_gate.authenticate(db, authorization)
