"""Company logo upload and removal.

Validation (size, MIME type) runs before any storage call. Blob cleanup
after a failed database write is best effort and only logged.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from unshared_api.auth.session_auth import AuthContext, require_company_admin
from unshared_api.errors import AppError, NotFound, UnexpectedError, ValidationError
from unshared_api.storage.logo_storage import LogoStorage, logo_object_path, path_from_public_url

logger = logging.getLogger(__name__)

MAX_LOGO_BYTES = 1024 * 1024

ALLOWED_TYPES: dict[str, str] = {
    "image/png": "png",
    "image/svg+xml": "svg",
    "image/jpeg": "jpg",
    "image/webp": "webp",
}


@dataclass(frozen=True)
class LogoFile:
    filename: Optional[str]
    content_type: Optional[str]
    content: bytes


def validate_logo(file: LogoFile) -> str:
    """Check size and type; return the object file extension."""
    size = len(file.content)
    if size > MAX_LOGO_BYTES:
        raise ValidationError(
            f"File size exceeds 1MB limit. Current size: {size / 1024:.2f} KB"
        )
    if file.content_type not in ALLOWED_TYPES:
        raise ValidationError("Invalid file type. Allowed types: PNG, SVG, JPEG, WebP")

    if file.filename and "." in file.filename:
        extension = file.filename.rsplit(".", 1)[1].lower()
        if extension.isalnum():
            return extension
    return ALLOWED_TYPES[file.content_type]


def _stored_path(company: dict[str, Any], storage: LogoStorage) -> Optional[str]:
    if company.get("logo_path"):
        return company["logo_path"]
    if company.get("logo_url"):
        return path_from_public_url(company["logo_url"], storage.bucket)
    return None


def _remove_quietly(storage: LogoStorage, path: str, event: str) -> None:
    try:
        storage.remove(path)
    except AppError:
        logger.error(event, extra={"path": path})


def upload_logo(
    ctx: AuthContext, storage: LogoStorage, company_id: str, file: LogoFile
) -> dict[str, Any]:
    extension = validate_logo(file)
    require_company_admin(ctx, company_id, "Only company admins can upload logos")

    store = ctx.store
    company = store.get_company(company_id)
    if not company:
        raise NotFound("Company not found")
    previous_path = _stored_path(company, storage)

    path = logo_object_path(company_id, int(time.time() * 1000), extension)
    public_url = storage.upload(path, file.content, file.content_type)

    try:
        updated = store.update_company(company_id, {"logo_url": public_url, "logo_path": path})
        if not updated:
            raise NotFound("Company not found")
    except AppError:
        logger.error("logo.db_update.failed", extra={"company_id": company_id, "path": path})
        _remove_quietly(storage, path, "logo.cleanup.failed")
        raise UnexpectedError("Failed to update company logo")

    if previous_path and previous_path != path:
        _remove_quietly(storage, previous_path, "logo.previous_cleanup.failed")

    logger.info(
        "logo.uploaded",
        extra={"company_id": company_id, "path": path, "bytes": len(file.content)},
    )
    return {"logo_url": public_url, "company": updated}


def delete_logo(
    ctx: AuthContext, storage: LogoStorage, company_id: str
) -> Optional[dict[str, Any]]:
    require_company_admin(ctx, company_id, "Only company admins can delete logos")

    store = ctx.store
    company = store.get_company(company_id)
    if not company:
        raise NotFound("Company not found")
    if not company.get("logo_url"):
        raise ValidationError("No logo to delete")

    path = _stored_path(company, storage)
    if path:
        _remove_quietly(storage, path, "logo.remove.failed")
    else:
        logger.warning("logo.path.unresolved", extra={"company_id": company_id})

    updated = store.update_company(company_id, {"logo_url": None, "logo_path": None})
    logger.info("logo.deleted", extra={"company_id": company_id})
    return updated
