"""Account lifecycle: signup, signin, signout, current user.

Signup creates the Supabase Auth user (Supabase sends the confirmation
email) and the user_profiles row. Without an invite token a companyName is
matched by exact name or created; with an invite token company assignment
is left to invitation acceptance.
"""

import logging
import re
from typing import Any, Optional
from urllib.parse import quote

from unshared_api.auth.provider import SupabaseAuthProvider
from unshared_api.auth.session_auth import AuthContext
from unshared_api.config.env import get_site_url
from unshared_api.db.store import SupabaseStore
from unshared_api.errors import AppError, ValidationError
from unshared_api.utils.sanitize import mask_email

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
DEFAULT_ROLE = "client"


def _display_name(metadata: Optional[dict[str, Any]], fallback: Optional[str] = None) -> Optional[str]:
    metadata = metadata or {}
    return (
        fallback
        or metadata.get("name")
        or metadata.get("full_name")
        or metadata.get("display_name")
    )


def _company_name(store: SupabaseStore, company_id: Optional[str]) -> Optional[str]:
    if not company_id:
        return None
    company = store.get_company(company_id)
    return company.get("name") if company else None


def _resolve_signup_company(store: SupabaseStore, company_name: Optional[str]) -> Optional[str]:
    name = (company_name or "").strip()
    if not name:
        return None
    existing = store.find_company_by_name(name)
    if existing:
        return existing["id"]
    try:
        return store.insert_company({"name": name})["id"]
    except AppError:
        logger.error("signup.company.create_failed", extra={"company_name": name})
        return None


def signup(
    store: SupabaseStore,
    provider: SupabaseAuthProvider,
    *,
    email: Optional[str],
    password: Optional[str],
    name: Optional[str] = None,
    company_name: Optional[str] = None,
    invite_token: Optional[str] = None,
) -> dict[str, Any]:
    """Create an account.

    Returns:
        {"user": {...}, "session": {...} or None}. The session is None until
        the email address is confirmed.

    Raises:
        ValidationError: Missing fields, bad email, short password, duplicate
    """
    if not email or not password:
        raise ValidationError("Email and password are required")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 8 characters")

    normalized_email = email.strip().lower()
    redirect_to = f"{get_site_url()}/auth/callback"
    if invite_token:
        redirect_to = f"{redirect_to}?invite={quote(invite_token, safe='')}"

    user, session = provider.sign_up(
        normalized_email, password, redirect_to=redirect_to, name=name
    )

    company_id = None if invite_token else _resolve_signup_company(store, company_name)

    profile_row: dict[str, Any] = {
        "user_id": user.id,
        "email": normalized_email,
        "role": DEFAULT_ROLE,
        "company_id": company_id,
    }
    if name:
        profile_row["name"] = name
    try:
        store.insert_profile(profile_row)
    except AppError:
        # Auth user exists; the profile can be repaired out of band.
        logger.error("signup.profile.create_failed", extra={"user_id": user.id})

    logger.info(
        "account.signup",
        extra={
            "user_id": user.id,
            "email": mask_email(normalized_email),
            "has_invite": bool(invite_token),
            "company_id": company_id,
        },
    )
    return {
        "user": {
            "id": user.id,
            "email": user.email or normalized_email,
            "name": _display_name(user.metadata, name),
            "role": DEFAULT_ROLE,
            "companyId": company_id,
        },
        "session": session,
    }


def signin(
    store: SupabaseStore,
    provider: SupabaseAuthProvider,
    *,
    email: Optional[str],
    password: Optional[str],
) -> dict[str, Any]:
    if not email or not password:
        raise ValidationError("Email and password are required")

    user, session = provider.sign_in(email.strip().lower(), password)

    profile = store.get_profile_by_user_id(user.id) or {}
    company_id = profile.get("company_id")

    logger.info("account.signin", extra={"user_id": user.id})
    return {
        "user": {
            "id": user.id,
            "email": user.email,
            "name": _display_name(user.metadata, profile.get("name")),
            "role": profile.get("role") or DEFAULT_ROLE,
            "companyId": company_id,
            "companyName": _company_name(store, company_id),
        },
        "session": session,
    }


def signout(provider: SupabaseAuthProvider, session_token: Optional[str]) -> None:
    if session_token:
        provider.sign_out(session_token)
    logger.info("account.signout", extra={"revoked": bool(session_token)})


def current_user(ctx: AuthContext) -> dict[str, Any]:
    profile = ctx.profile
    return {
        "id": ctx.user_id,
        "email": ctx.email or profile.get("email"),
        "name": profile.get("name"),
        "role": profile.get("role"),
        "companyId": profile.get("company_id"),
        "companyName": _company_name(ctx.store, profile.get("company_id")),
        "companyRole": profile.get("company_role"),
    }
