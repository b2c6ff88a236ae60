"""
FastAPI dependencies for authentication.

Provides ``get_context``, ``db_session``, ``get_current_user_id`` and
service builders used across the routes.  Everything hangs off
``app.state``; nothing here is a module-level singleton.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Cookie, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.context import AuthContext
from auth.errors import InvalidTokenError
from auth.reconciler import IdentityReconciler
from auth.service import AuthService
from database.repository import SQLAlchemyAccountRepository
from database.session import session_scope

AUTH_COOKIE = "Authorization"

_bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AuthContext:
    return request.app.state.auth_context


async def db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped DB session (commit on success, rollback on error)."""
    async with session_scope(request.app.state.session_factory) as session:
        yield session


def get_auth_service(
    context: AuthContext = Depends(get_context),
    session: AsyncSession = Depends(db_session),
) -> AuthService:
    return AuthService(context, SQLAlchemyAccountRepository(session))


def get_reconciler(
    context: AuthContext = Depends(get_context),
    session: AsyncSession = Depends(db_session),
) -> IdentityReconciler:
    return IdentityReconciler(context, SQLAlchemyAccountRepository(session))


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    cookie_token: Optional[str] = Cookie(default=None, alias=AUTH_COOKIE),
    context: AuthContext = Depends(get_context),
) -> str:
    """
    Extract and verify the Bearer token (or the ``Authorization`` cookie),
    returning the authenticated ``user_id``.
    """
    token = credentials.credentials if credentials else cookie_token
    if not token:
        raise InvalidTokenError("Missing Bearer token")
    return context.tokens.verify(token)
