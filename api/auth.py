"""
Auth API routes — register, login, Discord OAuth.

Route prefix: /api/auth
"""

from __future__ import annotations

import hmac
import logging
import secrets
from typing import Dict, Optional

from fastapi import APIRouter, Cookie, Depends, Query, Response, status

from auth.context import AuthContext
from auth.dependencies import AUTH_COOKIE, get_auth_service, get_context, get_reconciler
from auth.errors import (
    AccountNotFoundError,
    CredentialMismatchError,
    ExchangeError,
    InvalidStateError,
    PasswordMismatchError,
)
from auth.reconciler import IdentityReconciler
from auth.schemas import AuthResponse, AuthResult, LoginRequest, SignupRequest
from auth.service import AuthService

logger = logging.getLogger(__name__)

STATE_COOKIE = "oauth_state"

router = APIRouter(tags=["auth"])


def _set_auth_cookie(response: Response, result: AuthResult, context: AuthContext) -> None:
    response.set_cookie(
        key=AUTH_COOKIE,
        value=result.token.token,
        max_age=result.token.max_age,
        domain=context.settings.cookie_domain,
        secure=context.settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: SignupRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    context: AuthContext = Depends(get_context),
) -> AuthResponse:
    """Register a new user."""
    result = await service.signup(req)
    _set_auth_cookie(response, result, context)
    return AuthResponse.from_result(result)


@router.post("/login", response_model=AuthResponse, status_code=status.HTTP_202_ACCEPTED)
async def login(
    req: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    context: AuthContext = Depends(get_context),
) -> AuthResponse:
    """Login with email + password."""
    try:
        result = await service.login(req)
    except (AccountNotFoundError, PasswordMismatchError) as exc:
        logger.info("Login rejected for %s: %s", req.email, type(exc).__name__)
        raise CredentialMismatchError("Invalid email or password") from exc
    _set_auth_cookie(response, result, context)
    return AuthResponse.from_result(result)


@router.get("/discord/url")
async def discord_auth_url(
    response: Response,
    context: AuthContext = Depends(get_context),
) -> Dict[str, str]:
    """
    Return the Discord consent URL the frontend should redirect to.

    The signed ``state`` carries a nonce that is also set as a short-lived
    cookie; ``/discord/redirect`` only proceeds when the two match.
    """
    if not context.provider.is_configured():
        raise ExchangeError("Discord login is not configured")
    nonce = secrets.token_urlsafe(16)
    state = context.states.create(nonce)
    response.set_cookie(
        key=STATE_COOKIE,
        value=nonce,
        max_age=context.states.ttl_seconds,
        domain=context.settings.cookie_domain,
        secure=context.settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return {
        "auth_url": context.provider.get_auth_url(state),
        "state": state,
        "provider": context.provider.display_name,
    }


@router.get(
    "/discord/redirect",
    response_model=AuthResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def discord_redirect(
    response: Response,
    code: str = Query(default=""),
    state: str = Query(default=""),
    state_cookie: Optional[str] = Cookie(default=None, alias=STATE_COOKIE),
    reconciler: IdentityReconciler = Depends(get_reconciler),
    context: AuthContext = Depends(get_context),
) -> AuthResponse:
    """
    OAuth callback — Discord redirects here after consent.

    Checks the ``state`` against the cookie set by ``/discord/url``,
    exchanges the code, reconciles the Discord identity with a local
    account and sets the auth cookie.
    """
    nonce = context.states.verify(state)
    if not state_cookie or not hmac.compare_digest(
        nonce.encode(), state_cookie.encode("utf-8", "replace")
    ):
        logger.warning("OAuth state does not match the browser that requested it")
        raise InvalidStateError()

    result = await reconciler.reconcile(code)
    response.delete_cookie(STATE_COOKIE, domain=context.settings.cookie_domain)
    _set_auth_cookie(response, result, context)
    return AuthResponse.from_result(result)
