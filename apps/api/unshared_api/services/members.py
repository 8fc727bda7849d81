"""Company membership: list, edit, remove.

Last-admin protection: demoting an admin goes through the store's
conditional demotion, which refuses when that admin is the only one.
"""

import logging
from typing import Any, Optional

from unshared_api.auth.session_auth import AuthContext, is_company_admin
from unshared_api.errors import (
    LastAdminError,
    NotFound,
    Unauthorized,
    ValidationError,
)

logger = logging.getLogger(__name__)

COMPANY_ROLES = ("admin", "member")

MEMBER_NOT_FOUND = "Member not found or does not belong to your company"


def _require_company(ctx: AuthContext) -> str:
    if not ctx.company_id:
        raise Unauthorized("You must create a company first")
    return ctx.company_id


def list_members(ctx: AuthContext) -> dict[str, Any]:
    """Company, members (oldest first) and open invitations (newest first)."""
    company_id = _require_company(ctx)
    store = ctx.store

    company = store.get_company(company_id)
    if not company:
        raise NotFound("Company not found")

    return {
        "company": company,
        "members": store.list_company_members(company_id),
        "invitations": store.list_open_invitations(company_id),
    }


def _load_member(ctx: AuthContext, company_id: str, member_id: str) -> dict[str, Any]:
    member = ctx.store.get_profile(member_id)
    if not member or member.get("company_id") != company_id:
        raise NotFound(MEMBER_NOT_FOUND)
    return member


def update_member(
    ctx: AuthContext,
    member_id: str,
    name: Optional[str] = None,
    company_role: Optional[str] = None,
) -> dict[str, Any]:
    """Edit a member's display name and/or company role.

    Anyone may rename themselves; editing others and any role change
    require company admin.
    """
    if name is None and company_role is None:
        raise ValidationError("At least one field (name or company_role) is required")
    if company_role is not None and company_role not in COMPANY_ROLES:
        raise ValidationError("Invalid company_role. Must be 'admin' or 'member'")

    company_id = _require_company(ctx)
    member = _load_member(ctx, company_id, member_id)

    is_self = member["id"] == ctx.profile["id"]
    caller_is_admin = is_company_admin(ctx.profile)

    if not is_self and not caller_is_admin:
        raise Unauthorized("Only company admins can edit other members")
    if company_role is not None and not caller_is_admin:
        raise Unauthorized("Only company admins can change roles")

    store = ctx.store
    changed: list[str] = []

    if member.get("company_role") == "admin" and company_role == "member":
        if not store.demote_company_admin(member["id"], company_id):
            logger.info(
                "member.demote.rejected_last_admin",
                extra={"member_id": member["id"]},
            )
            raise LastAdminError()
        member = {**member, "company_role": "member"}
        changed.append("company_role")
        company_role = None

    fields: dict[str, Any] = {}
    if name is not None:
        fields["name"] = name.strip() or None
    if company_role is not None:
        fields["company_role"] = company_role

    changed.extend(fields)
    if fields:
        updated = store.update_profile(member["id"], fields)
        if not updated:
            raise NotFound(MEMBER_NOT_FOUND)
        member = updated

    if is_self:
        ctx.profile = {**ctx.profile, **member}

    logger.info(
        "member.updated",
        extra={"member_id": member["id"], "fields": changed},
    )
    return member


def remove_member(ctx: AuthContext, member_id: str) -> None:
    """Detach a member from the company (profile row is kept)."""
    company_id = _require_company(ctx)
    if not is_company_admin(ctx.profile):
        raise Unauthorized("Only company admins can remove members")
    if member_id == ctx.profile["id"]:
        raise ValidationError("Cannot remove yourself from the company")

    member = _load_member(ctx, company_id, member_id)
    ctx.store.update_profile(member["id"], {"company_id": None, "company_role": "member"})

    logger.info("member.removed", extra={"member_id": member["id"]})
