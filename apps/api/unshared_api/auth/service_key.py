"""Service key authentication for machine-to-machine writes.

The detection pipeline pushes dashboard data with the project's secret key:

    POST /api/companies/{id}/data
    Authorization: Bearer <SB_SECRET_KEY>      (or  x-api-key: <SB_SECRET_KEY>)

SECURITY:
- Constant-time comparison
- Uniform 401 for missing and wrong keys
- Missing server configuration is a 500, never an open door
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from unshared_api.auth.token_lifecycle import constant_time_equals
from unshared_api.errors import ConfigurationError, InvalidApiKey
from unshared_api.supabase_client import get_supabase_secret_key

logger = logging.getLogger(__name__)

service_key_security = HTTPBearer(auto_error=False, description="Service key")


def get_expected_service_key() -> str:
    """FastAPI dependency: configured service key."""
    try:
        return get_supabase_secret_key()
    except RuntimeError as e:
        logger.error("service_key.config.missing", extra={"error": str(e)})
        raise ConfigurationError() from e


async def require_service_key(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(service_key_security),
    expected: str = Depends(get_expected_service_key),
) -> None:
    if credentials and credentials.credentials:
        presented = credentials.credentials
    else:
        presented = request.headers.get("x-api-key")

    if not presented or not constant_time_equals(presented, expected):
        logger.warning("service_key.rejected", extra={"path": request.url.path})
        raise InvalidApiKey()
