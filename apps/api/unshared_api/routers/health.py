"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from unshared_api import __version__
from unshared_api.config.env import get_brevo_api_key
from unshared_api.db.store import SupabaseStore, get_store
from unshared_api.errors import AppError

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    services: dict[str, str]


def check_store(store: SupabaseStore) -> str:
    """Check store connectivity.

    Returns:
        str: "up" if healthy, error message otherwise
    """
    try:
        store.ping()
        return "up"
    except AppError as e:
        logger.error("health.store.down", extra={"error": e.message})
        return f"down: {e.message[:50]}"


def check_email() -> str:
    return "configured" if get_brevo_api_key() else "not configured"


@router.get("/health", response_model=HealthResponse)
async def health(response: Response, store: SupabaseStore = Depends(get_store)) -> HealthResponse:
    """Liveness plus configuration status.

    503 when the store is unreachable; a missing email key is reported but
    does not fail the check.
    """
    services = {"store": check_store(store), "email": check_email()}
    healthy = services["store"] == "up"
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        services=services,
    )
