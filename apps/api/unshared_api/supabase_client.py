"""Supabase clients for the API process.

Two clients, both cached for the process lifetime:
- auth client (publishable key): sign-up, sign-in, token verification
- admin client (secret key): tables, RPCs and the logo bucket; bypasses RLS,
  so company scoping happens in unshared_api.auth.session_auth

Either key may be given under its pre-2024 dashboard name.
"""

import logging
import os
from functools import lru_cache

from supabase import Client, create_client

logger = logging.getLogger(__name__)


def _first_env(*names: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    raise RuntimeError(f"{' or '.join(names)} must be set")


@lru_cache(maxsize=1)
def get_supabase_url() -> str:
    return _first_env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")


@lru_cache(maxsize=1)
def get_supabase_api_key() -> str:
    """Publishable key (SB_PUBLISHABLE_KEY, formerly SUPABASE_ANON_KEY)."""
    return _first_env("SB_PUBLISHABLE_KEY", "SUPABASE_ANON_KEY")


@lru_cache(maxsize=1)
def get_supabase_secret_key() -> str:
    """Secret key (SB_SECRET_KEY, formerly SUPABASE_SERVICE_ROLE_KEY).

    Also the credential the data ingest endpoint expects from callers.
    """
    return _first_env("SB_SECRET_KEY", "SUPABASE_SERVICE_ROLE_KEY")


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    url = get_supabase_url()
    logger.info("supabase.client.init", extra={"supabase_url": url, "key_type": "publishable"})
    return create_client(url, get_supabase_api_key())


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    url = get_supabase_url()
    logger.info("supabase.client.init", extra={"supabase_url": url, "key_type": "secret"})
    return create_client(url, get_supabase_secret_key())
