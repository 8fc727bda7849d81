"""Supabase Auth adapter.

Wraps the supabase-py auth API behind a small interface used by the session
dependency and the account endpoints:

- get_user(token): verify an access token, return the identity
- sign_up / sign_in / sign_out: credential lifecycle

Auth API failures arrive as exceptions whose message is the provider's
error text; they are mapped to AppError subclasses here so callers never see
SDK exception types.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from unshared_api.errors import ConfigurationError, InvalidSession, UpstreamError, ValidationError
from unshared_api.supabase_client import get_supabase_admin_client, get_supabase_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    """Identity resolved from the auth provider."""

    id: str
    email: Optional[str]
    email_confirmed: bool = False
    metadata: Optional[dict[str, Any]] = None


def _to_auth_user(user: Any) -> AuthUser:
    return AuthUser(
        id=str(user.id),
        email=user.email,
        email_confirmed=bool(getattr(user, "email_confirmed_at", None)),
        metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


def _session_payload(session: Any) -> Optional[dict[str, Any]]:
    if session is None:
        return None
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_at": session.expires_at,
        "expires_in": session.expires_in,
        "token_type": session.token_type,
    }


def _resolve_client(factory):
    try:
        return factory()
    except RuntimeError as e:
        logger.error("auth.config.missing", extra={"error": str(e)})
        raise ConfigurationError() from e


class SupabaseAuthProvider:
    """Auth operations backed by Supabase Auth."""

    def __init__(self, client=None, admin_client=None):
        self._client = client
        self._admin_client = admin_client

    @property
    def client(self):
        if self._client is None:
            self._client = _resolve_client(get_supabase_client)
        return self._client

    @property
    def admin_client(self):
        if self._admin_client is None:
            self._admin_client = _resolve_client(get_supabase_admin_client)
        return self._admin_client

    def get_user(self, access_token: str) -> AuthUser:
        """Verify an access token.

        Raises:
            InvalidSession: Token rejected or expired
        """
        client = self.client
        try:
            user_response = client.auth.get_user(access_token)
        except Exception as e:
            logger.warning("auth.token.rejected", extra={"error": str(e)})
            raise InvalidSession() from e

        if not user_response or not user_response.user:
            raise InvalidSession()

        return _to_auth_user(user_response.user)

    def sign_up(
        self,
        email: str,
        password: str,
        *,
        redirect_to: str,
        name: Optional[str] = None,
    ) -> tuple[AuthUser, Optional[dict[str, Any]]]:
        """Create an auth user. Returns (user, session-or-None).

        Raises:
            ValidationError: Duplicate account or rejected credentials
        """
        options: dict[str, Any] = {"email_redirect_to": redirect_to}
        if name:
            options["data"] = {"name": name}

        client = self.client
        try:
            response = client.auth.sign_up(
                {"email": email, "password": password, "options": options}
            )
        except Exception as e:
            message = str(e)
            lowered = message.lower()
            if "already registered" in lowered or "already exists" in lowered:
                raise ValidationError(
                    "An account with this email already exists. Please sign in instead."
                ) from e
            logger.warning("auth.signup.rejected", extra={"error": message})
            raise ValidationError(message or "Signup failed") from e

        if not response.user:
            raise UpstreamError("Signup failed: no user returned")

        return _to_auth_user(response.user), _session_payload(response.session)

    def sign_in(self, email: str, password: str) -> tuple[AuthUser, dict[str, Any]]:
        """Password sign-in. Returns (user, session).

        Raises:
            ValidationError: Bad credentials or unconfirmed email
        """
        client = self.client
        try:
            response = client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            lowered = str(e).lower()
            if "email not confirmed" in lowered:
                raise ValidationError(
                    "Please check your email to confirm your account before signing in."
                ) from e
            raise ValidationError("Invalid email or password") from e

        if not response.user or not response.session:
            raise ValidationError("Invalid email or password")

        return _to_auth_user(response.user), _session_payload(response.session)

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind access_token (best effort)."""
        admin_client = self.admin_client
        try:
            admin_client.auth.admin.sign_out(access_token)
        except Exception as e:
            logger.warning("auth.signout.failed", extra={"error": str(e)})


def get_auth_provider() -> SupabaseAuthProvider:
    """FastAPI dependency: auth provider (clients resolved lazily)."""
    return SupabaseAuthProvider()
