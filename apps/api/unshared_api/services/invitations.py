"""Invitation lifecycle.

State machine per invitation:

    Pending -> Accepted   (accept: accepted_at set)
    Pending -> Cancelled  (cancel: row deleted)
    Pending -> Expired    (derived at read time: now > expires_at)

The token (64 hex chars) is the only lookup key for acceptance, and the
accepting user's profile email must match the invited address
(case-insensitive). Every precondition is checked before the first write.
"""

import logging
from datetime import timedelta
from typing import Any, Optional

from unshared_api.auth.session_auth import (
    AuthContext,
    has_company_access,
    is_company_admin,
    is_super_admin,
)
from unshared_api.auth.token_lifecycle import generate_invite_token
from unshared_api.db.store import SupabaseStore
from unshared_api.errors import (
    AlreadyAccepted,
    AppError,
    EmailMismatch,
    InvitationExpired,
    NotFound,
    Unauthorized,
    UpstreamError,
    ValidationError,
    VerificationFailed,
)
from unshared_api.services.email import InviteMailer
from unshared_api.templates.invite import INVITATION_TTL_DAYS
from unshared_api.utils.sanitize import mask_email
from unshared_api.utils.timestamps import is_expired, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

INVITATION_TTL = timedelta(days=INVITATION_TTL_DAYS)
INVITED_ROLE = "client"


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def public_invitation(invitation: dict[str, Any]) -> dict[str, Any]:
    """Invitation row without its token."""
    return {key: value for key, value in invitation.items() if key != "token"}


def _check_acceptable(invitation: dict[str, Any]) -> None:
    if is_expired(invitation.get("expires_at")):
        raise InvitationExpired()
    if invitation.get("accepted_at"):
        raise AlreadyAccepted()


# ============================================================================
# Create
# ============================================================================


async def create_invitation(
    ctx: AuthContext,
    mailer: InviteMailer,
    email: Optional[str],
    company_role: Optional[str] = None,
) -> dict[str, Any]:
    """Invite an email address into the caller's company and send the email.

    If the email cannot be sent the invitation row is deleted again.
    """
    company_id = ctx.company_id
    if not company_id:
        raise Unauthorized("You must create a company first")
    if not is_company_admin(ctx.profile):
        raise Unauthorized("Only company admins can invite members")

    invitee = normalize_email(email)
    if not invitee:
        raise ValidationError("Email is required")

    role = "admin" if company_role == "admin" else "member"
    store = ctx.store

    existing = store.find_profile_by_email(invitee)
    if existing and existing.get("company_id") == company_id:
        raise ValidationError("User is already a member of this company")

    company = store.get_company(company_id)
    if not company:
        raise NotFound("Company not found")

    now = utc_now()
    token = generate_invite_token()
    invitation = store.insert_invitation(
        {
            "company_id": company_id,
            "email": invitee,
            "role": INVITED_ROLE,
            "company_role": role,
            "token": token,
            "invited_by": ctx.user_id,
            "created_at": now.isoformat(),
            "expires_at": (now + INVITATION_TTL).isoformat(),
        }
    )

    inviter_name = ctx.profile.get("name") or ctx.profile.get("email") or "Someone"
    result = await mailer.send_invite(
        to=invitee,
        inviter_name=inviter_name,
        company_name=company["name"],
        token=token,
        company_role=role,
    )

    if not result.success:
        try:
            store.delete_invitation(invitation["id"])
        except AppError:
            logger.error(
                "invitation.cleanup.failed",
                extra={"invitation_id": invitation["id"]},
            )
        raise UpstreamError(
            "Failed to send invitation email",
            details={"reason": result.error},
        )

    logger.info(
        "invitation.created",
        extra={
            "invitation_id": invitation["id"],
            "invitee": mask_email(invitee),
            "company_role": role,
        },
    )
    return public_invitation(invitation)


# ============================================================================
# Accept
# ============================================================================


def accept_invitation(ctx: AuthContext, token: Optional[str]) -> dict[str, Any]:
    """Join the invitation's company as the authenticated user."""
    if not token:
        raise ValidationError("Invitation token is required")

    store = ctx.store
    invitation = store.get_invitation_by_token(token)
    if not invitation:
        raise NotFound("Invitation not found")

    _check_acceptable(invitation)

    if ctx.profile_email != normalize_email(invitation.get("email")):
        logger.warning(
            "invitation.accept.email_mismatch",
            extra={"invitation_id": invitation["id"], "user_id": ctx.user_id},
        )
        raise EmailMismatch()

    company_id = invitation["company_id"]
    company_role = invitation.get("company_role") or "member"
    role = invitation.get("role") or INVITED_ROLE
    if is_super_admin(ctx.profile):
        # global role is never downgraded by joining a company
        role = "super_admin"

    store.update_profile(
        ctx.profile["id"],
        {"company_id": company_id, "role": role, "company_role": company_role},
    )

    refreshed = store.get_profile(ctx.profile["id"])
    if (
        not refreshed
        or refreshed.get("company_id") != company_id
        or refreshed.get("company_role") != company_role
    ):
        logger.error(
            "invitation.accept.verification_failed",
            extra={"invitation_id": invitation["id"], "user_id": ctx.user_id},
        )
        raise VerificationFailed()

    try:
        store.mark_invitation_accepted(invitation["id"], utc_now_iso())
    except AppError:
        logger.error(
            "invitation.accept.mark_failed",
            extra={"invitation_id": invitation["id"]},
        )

    ctx.profile = refreshed
    company = store.get_company(company_id) or {}

    logger.info(
        "invitation.accepted",
        extra={"invitation_id": invitation["id"], "company_id": company_id},
    )
    return {
        "company": {"id": company_id, "name": company.get("name")},
        "user": {
            "companyId": company_id,
            "role": refreshed.get("role"),
            "companyRole": refreshed.get("company_role"),
        },
    }


# ============================================================================
# Cancel / details / pending
# ============================================================================


def cancel_invitation(ctx: AuthContext, invitation_id: Optional[str]) -> None:
    if not invitation_id:
        raise ValidationError("Invitation ID is required")

    store = ctx.store
    invitation = store.get_invitation(invitation_id)
    if not invitation:
        raise NotFound("Invitation not found")

    company_id = invitation["company_id"]
    if not (has_company_access(ctx.profile, company_id) and is_company_admin(ctx.profile)):
        raise Unauthorized("Only company admins can cancel invitations")

    store.delete_invitation(invitation_id)
    logger.info("invitation.cancelled", extra={"invitation_id": invitation_id})


def invitation_details(store: SupabaseStore, token: Optional[str]) -> dict[str, Any]:
    """Public preview of an invitation for the signup/accept pages."""
    if not token:
        raise ValidationError("Invitation token is required")

    invitation = store.get_invitation_by_token(token)
    if not invitation:
        raise NotFound("Invalid invitation")

    _check_acceptable(invitation)

    company = store.get_company(invitation["company_id"]) or {}
    return {
        "email": invitation["email"],
        "companyName": company.get("name"),
        "companyRole": invitation.get("company_role"),
        "expiresAt": invitation.get("expires_at"),
    }


def pending_for_user(store: SupabaseStore, email: Optional[str]) -> list[dict[str, Any]]:
    """Open invitations addressed to email."""
    address = normalize_email(email)
    if not address:
        return []
    return [
        {
            "id": row["id"],
            "company_id": row["company_id"],
            "companyName": row.get("company_name"),
            "email": row["email"],
            "role": row.get("role"),
            "company_role": row.get("company_role"),
            "created_at": row.get("created_at"),
            "expires_at": row.get("expires_at"),
        }
        for row in store.list_pending_invitations_for_email(address)
    ]
