"""Session authentication for user-authenticated endpoints.

Supabase JWT-based session auth shared by every protected route.

FLOW:
1. Client signs in via POST /api/auth/signin -> receives access_token
   (also set as the sb-access-token cookie)
2. Client calls an endpoint with Authorization: Bearer <jwt> or the cookie
3. get_auth_context validates the JWT with Supabase Auth and loads the
   caller's profile row (role, company membership)
4. Route handlers check the predicates below before touching data

SECURITY:
- JWT signature and expiry verified by Supabase on every request
- Profile lookup keyed by the verified user id, never by client input
- has_company_access is strict membership; super admins are admitted
  explicitly by read-only routes only
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from unshared_api.auth.provider import SupabaseAuthProvider, get_auth_provider
from unshared_api.context import company_id_var, user_id_var
from unshared_api.db.store import SupabaseStore, get_store
from unshared_api.errors import NotAuthenticated, NotFound, Unauthorized

logger = logging.getLogger(__name__)

SESSION_COOKIE = "sb-access-token"

# HTTPBearer scheme for session JWT
session_security = HTTPBearer(auto_error=False, description="Supabase JWT Session Token")


@dataclass
class AuthContext:
    """Authenticated caller: identity, profile row and the store to use."""

    user_id: str
    email: Optional[str]
    profile: dict[str, Any]
    store: SupabaseStore

    @property
    def company_id(self) -> Optional[str]:
        return self.profile.get("company_id")

    @property
    def profile_email(self) -> str:
        return (self.profile.get("email") or self.email or "").lower()


# ============================================================================
# Predicates
# ============================================================================


def is_super_admin(profile: Optional[dict[str, Any]]) -> bool:
    return bool(profile) and profile.get("role") == "super_admin"


def has_company_access(profile: Optional[dict[str, Any]], company_id: Optional[str]) -> bool:
    """Strict membership: the profile belongs to company_id."""
    if not profile or not company_id:
        return False
    return profile.get("company_id") == company_id


def is_company_admin(profile: Optional[dict[str, Any]]) -> bool:
    return bool(profile) and profile.get("company_role") == "admin"


def require_company_admin(ctx: AuthContext, company_id: str, message: str = "Unauthorized") -> None:
    """Raise Unauthorized unless the caller administers company_id."""
    if not (has_company_access(ctx.profile, company_id) and is_company_admin(ctx.profile)):
        raise Unauthorized(message)


def require_company_read(ctx: AuthContext, company_id: str) -> None:
    """Raise Unauthorized unless the caller is a member or a super admin."""
    if not (is_super_admin(ctx.profile) or has_company_access(ctx.profile, company_id)):
        raise Unauthorized("Unauthorized - You do not have access to this company")


# ============================================================================
# Dependency
# ============================================================================


def extract_access_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE) or None


async def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(session_security),
    store: SupabaseStore = Depends(get_store),
    provider: SupabaseAuthProvider = Depends(get_auth_provider),
) -> AuthContext:
    """Resolve the authenticated caller.

    Raises:
        NotAuthenticated: No bearer header and no session cookie (401)
        ConfigurationError: Supabase settings missing (500)
        InvalidSession: Token rejected by Supabase Auth (401)
        NotFound: No profile row for the user (404)
    """
    token = extract_access_token(request, credentials)
    if not token:
        raise NotAuthenticated()

    user = provider.get_user(token)

    profile = store.get_profile_by_user_id(user.id)
    if not profile:
        logger.warning(
            "session.profile.missing",
            extra={"user_id": user.id},
        )
        raise NotFound("User profile not found")

    user_id_var.set(user.id)
    company_id_var.set(profile.get("company_id") or "")

    return AuthContext(user_id=user.id, email=user.email, profile=profile, store=store)


async def require_super_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Dependency for /api/admin routes."""
    if not is_super_admin(ctx.profile):
        logger.warning("admin.access.denied", extra={"user_id": ctx.user_id})
        raise Unauthorized("Unauthorized - Super admin access required")
    return ctx
