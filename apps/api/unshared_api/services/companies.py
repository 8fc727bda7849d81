"""Company lifecycle: create, read, update, delete."""

import logging
from typing import Any, Optional

from unshared_api.auth.session_auth import (
    AuthContext,
    has_company_access,
    is_company_admin,
    is_super_admin,
    require_company_read,
)
from unshared_api.errors import (
    AppError,
    Conflict,
    NotFound,
    Unauthorized,
    UnexpectedError,
    ValidationError,
)
from unshared_api.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


def normalize_company_name(name: Optional[str]) -> str:
    """Trim a company name; blank names raise ValidationError."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Company name is required")
    return cleaned


def normalize_website_url(website_url: Optional[str]) -> Optional[str]:
    cleaned = (website_url or "").strip()
    return cleaned or None


def create_company(
    ctx: AuthContext, name: Optional[str], website_url: Optional[str] = None
) -> dict[str, Any]:
    """Create a company and make the caller its admin.

    The name is validated before any store call. If attaching the caller
    fails, the new company row is deleted again.
    """
    company_name = normalize_company_name(name)

    if ctx.company_id:
        raise Conflict("You already belong to a company")

    store = ctx.store
    company = store.insert_company(
        {"name": company_name, "website_url": normalize_website_url(website_url)}
    )

    try:
        profile = store.update_profile(
            ctx.profile["id"], {"company_id": company["id"], "company_role": "admin"}
        )
        if not profile:
            raise UnexpectedError("Failed to link company to profile")
    except AppError:
        logger.error(
            "company.create.link_failed",
            extra={"company_id": company["id"], "user_id": ctx.user_id},
        )
        try:
            store.delete_company(company["id"])
        except AppError:
            logger.error("company.create.rollback_failed", extra={"company_id": company["id"]})
        raise UnexpectedError("Failed to link company to profile")

    ctx.profile = profile
    logger.info(
        "company.created",
        extra={"company_id": company["id"], "user_id": ctx.user_id},
    )
    return company


def list_companies(ctx: AuthContext) -> list[dict[str, Any]]:
    """Super admins see every company; clients see their own (if any)."""
    if is_super_admin(ctx.profile):
        return ctx.store.list_companies()
    if not ctx.company_id:
        return []
    company = ctx.store.get_company(ctx.company_id)
    return [company] if company else []


def get_company(ctx: AuthContext, company_id: str) -> dict[str, Any]:
    require_company_read(ctx, company_id)
    company = ctx.store.get_company(company_id)
    if not company:
        raise NotFound("Company not found")
    return company


def update_company(
    ctx: AuthContext,
    company_id: str,
    name: Optional[str],
    website_url: Optional[str] = None,
) -> dict[str, Any]:
    if not (has_company_access(ctx.profile, company_id) and is_company_admin(ctx.profile)):
        raise Unauthorized("Only company admins can update company details")

    fields = {
        "name": normalize_company_name(name),
        "website_url": normalize_website_url(website_url),
        "updated_at": utc_now_iso(),
    }
    company = ctx.store.update_company(company_id, fields)
    if not company:
        raise NotFound("Company not found")

    logger.info("company.updated", extra={"company_id": company_id})
    return company


def delete_company(ctx: AuthContext) -> str:
    """Delete the caller's company, detaching every member first.

    Both writes happen in one store transaction.

    Returns:
        The deleted company id
    """
    company_id = ctx.company_id
    if not company_id:
        raise NotFound("You do not belong to a company")
    if not is_company_admin(ctx.profile):
        raise Unauthorized("Only company admins can delete the company")

    detached = ctx.store.delete_company(company_id)

    ctx.profile = {**ctx.profile, "company_id": None}
    logger.info(
        "company.deleted",
        extra={"company_id": company_id, "members_detached": detached},
    )
    return company_id
