"""Environment variable resolution utilities.

Canonical env names + fail-fast validation for required settings.
Optional settings fall back to development defaults.
"""

import os
from typing import Optional

DEFAULT_SITE_URL = "http://localhost:3000"
DEFAULT_BREVO_API_BASE_URL = "https://api.brevo.com/v3"
DEFAULT_EMAIL_SERVICE_URL = "https://emailservice.unsharedlabs.com/api"
DEFAULT_EMAIL_FROM_ADDRESS = "support@unsharedlabs.com"
DEFAULT_EMAIL_FROM_NAME = "Unshared Labs"
DEFAULT_LOGO_BUCKET = "company_logos"


def get_app_env() -> str:
    """Get application environment name.

    Priority:
    1. APP_ENV (canonical)
    2. NODE_ENV (legacy deployment compat)
    3. Default: "development"

    Returns:
        Environment name (lowercase)
    """
    return (
        os.getenv("APP_ENV")
        or os.getenv("NODE_ENV")
        or "development"
    ).lower()


def is_production_env() -> bool:
    """Determine if running in production.

    Production hides error details from API responses.
    """
    return get_app_env() in {"prod", "production"}


def get_site_url() -> str:
    """Get the public site base URL used in email deep links.

    Canonical: SITE_URL
    Fallback: NEXT_PUBLIC_SITE_URL (frontend deployment name)

    Returns:
        Site URL without trailing slash
    """
    url = os.getenv("SITE_URL") or os.getenv("NEXT_PUBLIC_SITE_URL") or DEFAULT_SITE_URL
    return url.rstrip("/")


def get_brevo_api_key() -> Optional[str]:
    """Get Brevo API key.

    Optional: email sending degrades to a reported failure when missing.
    """
    return os.getenv("BREVO_API_KEY") or None


def get_brevo_api_base_url() -> str:
    return os.getenv("BREVO_API_BASE_URL", DEFAULT_BREVO_API_BASE_URL).rstrip("/")


def get_email_service_url() -> str:
    """Get sender-verification service base URL."""
    return os.getenv("EMAIL_SERVICE_URL", DEFAULT_EMAIL_SERVICE_URL).rstrip("/")


def get_email_sender() -> tuple[str, str]:
    """Get (from_address, from_name) for outgoing email.

    Returns:
        Tuple of sender email address and display name
    """
    return (
        os.getenv("EMAIL_FROM_ADDRESS") or DEFAULT_EMAIL_FROM_ADDRESS,
        os.getenv("EMAIL_FROM_NAME") or DEFAULT_EMAIL_FROM_NAME,
    )


def get_logo_bucket() -> str:
    return os.getenv("LOGO_BUCKET") or DEFAULT_LOGO_BUCKET


def get_cors_allowed_origins() -> list[str]:
    """Get CORS allowlist.

    Production: explicit allowlist (comma-separated CORS_ALLOWED_ORIGINS).
    Dev fallback: localhost variants.
    """
    cors_origins_env = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if cors_origins_env:
        return [origin.strip() for origin in cors_origins_env.split(",") if origin.strip()]
    return [
        "http://localhost:3000",
        "http://localhost:8000",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:8000",
    ]


def json_logs_enabled() -> bool:
    """Structured JSON logging switch (JSON_LOGS=false disables)."""
    return os.getenv("JSON_LOGS", "true").lower() != "false"


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
