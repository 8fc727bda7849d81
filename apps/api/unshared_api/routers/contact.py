"""Public contact form (acknowledged and logged, not persisted)."""

import logging
from typing import Any

from fastapi import APIRouter

from unshared_api.errors import ValidationError
from unshared_api.schemas import ContactRequest
from unshared_api.utils.sanitize import mask_email

router = APIRouter(prefix="/api/contact", tags=["contact"])
logger = logging.getLogger(__name__)


@router.post("")
async def submit_contact(payload: ContactRequest) -> dict[str, Any]:
    if not payload.name or not payload.email or not payload.message:
        raise ValidationError("Missing required fields")

    logger.info(
        "contact.received",
        extra={"from": mask_email(payload.email), "message_length": len(payload.message)},
    )
    return {"success": True, "message": "Message received successfully"}
