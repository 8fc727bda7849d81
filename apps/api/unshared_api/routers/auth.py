"""Account endpoints.

- POST /api/auth/signup   create account (+ company, or deferred to invite)
- POST /api/auth/signin   password sign-in, sets the session cookie
- POST /api/auth/signout  revoke session, clear the session cookie
- GET  /api/auth/me       current user with company info

SECURITY:
- Session cookie is HttpOnly, SameSite=Lax, Secure in production
- Passwords never logged; emails masked in logs
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from unshared_api.auth.provider import SupabaseAuthProvider, get_auth_provider
from unshared_api.auth.session_auth import (
    SESSION_COOKIE,
    AuthContext,
    extract_access_token,
    get_auth_context,
    session_security,
)
from unshared_api.config.env import is_production_env
from unshared_api.db.store import SupabaseStore, get_store
from unshared_api.schemas import SigninRequest, SignoutRequest, SignupRequest
from unshared_api.services import accounts

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)

SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 7


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    store: SupabaseStore = Depends(get_store),
    provider: SupabaseAuthProvider = Depends(get_auth_provider),
) -> dict[str, Any]:
    """Create an account. The user must confirm their email before signing in."""
    result = accounts.signup(
        store,
        provider,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        company_name=payload.company_name,
        invite_token=payload.invite_token,
    )
    return {"success": True, **result}


@router.post("/signin")
async def signin(
    payload: SigninRequest,
    response: Response,
    store: SupabaseStore = Depends(get_store),
    provider: SupabaseAuthProvider = Depends(get_auth_provider),
) -> dict[str, Any]:
    result = accounts.signin(store, provider, email=payload.email, password=payload.password)

    session = result.get("session") or {}
    if session.get("access_token"):
        response.set_cookie(
            SESSION_COOKIE,
            session["access_token"],
            max_age=SESSION_COOKIE_MAX_AGE,
            httponly=True,
            secure=is_production_env(),
            samesite="lax",
        )
    return {"success": True, **result}


@router.post("/signout")
async def signout(
    request: Request,
    response: Response,
    payload: Optional[SignoutRequest] = None,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(session_security),
    provider: SupabaseAuthProvider = Depends(get_auth_provider),
) -> dict[str, Any]:
    """End the session. The token comes from the body, the header or the cookie."""
    token = (payload.session_token if payload else None) or extract_access_token(
        request, credentials
    )
    accounts.signout(provider, token)
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True}


@router.get("/me")
async def me(ctx: AuthContext = Depends(get_auth_context)) -> dict[str, Any]:
    return {"success": True, "user": accounts.current_user(ctx)}
