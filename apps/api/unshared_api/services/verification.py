"""Per-company sender verification settings.

Row: company_verification_settings (one per company)
- sender_email / sender_name / sender_id / is_verified: sender identity
- prevention_steps: {"step1", "step2", "step3"} checklist
- domain / domain_brevo_id / domain_dns_records: see services.domains
- email_template: HTML template used for customer-facing emails

Saves are merges: fields not passed keep their stored value.
"""

import logging
from typing import Any, Optional

from unshared_api.auth.session_auth import AuthContext, has_company_access, require_company_admin
from unshared_api.db.store import SupabaseStore
from unshared_api.errors import Unauthorized, ValidationError
from unshared_api.integrations.sender_service import SenderVerificationClient
from unshared_api.utils.sanitize import mask_email
from unshared_api.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

ADMIN_REQUIRED = "Unauthorized - Admin access required"

MERGED_FIELDS = (
    "sender_email",
    "sender_name",
    "sender_id",
    "is_verified",
    "domain",
    "domain_brevo_id",
    "domain_dns_records",
    "email_template",
)

PREVENTION_STEPS = (2, 3)


def default_prevention_steps() -> dict[str, bool]:
    return {"step1": False, "step2": False, "step3": False}


def save_settings(store: SupabaseStore, company_id: str, **changes: Any) -> dict[str, Any]:
    """Merge changes into the stored settings and upsert.

    A verified sender always implies prevention step 1.
    """
    unknown = set(changes) - set(MERGED_FIELDS) - {"prevention_steps"}
    if unknown:
        raise ValueError(f"Unknown verification settings fields: {sorted(unknown)}")

    existing = store.get_verification_settings(company_id) or {}

    steps = dict(
        changes.get("prevention_steps")
        or existing.get("prevention_steps")
        or default_prevention_steps()
    )
    if changes.get("is_verified") is True or existing.get("is_verified"):
        steps["step1"] = True

    row: dict[str, Any] = {
        "company_id": company_id,
        "prevention_steps": steps,
        "updated_at": utc_now_iso(),
    }
    for field in MERGED_FIELDS:
        if field in changes:
            row[field] = changes[field]
        elif existing.get(field) is not None:
            row[field] = existing[field]

    return store.upsert_verification_settings(row)


def get_settings(ctx: AuthContext, company_id: str) -> Optional[dict[str, Any]]:
    if not has_company_access(ctx.profile, company_id):
        raise Unauthorized()
    return ctx.store.get_verification_settings(company_id)


def update_settings(
    ctx: AuthContext,
    company_id: str,
    sender_email: Optional[str] = None,
    sender_name: Optional[str] = None,
    is_verified: Optional[bool] = None,
) -> dict[str, Any]:
    """Directly set sender fields; omitted fields keep their stored value."""
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)

    changes: dict[str, Any] = {}
    if sender_email is not None:
        changes["sender_email"] = sender_email.strip() or None
    if sender_name is not None:
        changes["sender_name"] = sender_name.strip() or None
    if is_verified is not None:
        changes["is_verified"] = bool(is_verified)

    saved = save_settings(ctx.store, company_id, **changes)
    logger.info(
        "verification.settings.saved",
        extra={"company_id": company_id, "fields": sorted(changes)},
    )
    return saved


async def create_sender(
    ctx: AuthContext,
    client: SenderVerificationClient,
    company_id: str,
    email: Optional[str],
    name: Optional[str],
    update_mode: bool = False,
) -> dict[str, Any]:
    """Register the company's sender identity and trigger an OTP email.

    In update mode the stored sender email/name are kept until the new
    address is confirmed by OTP.
    """
    if not email or not name:
        raise ValidationError("Email and name are required")
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)

    sender = await client.create_sender(email, name)

    store = ctx.store
    existing = store.get_verification_settings(company_id) or {}
    changes: dict[str, Any] = {
        "sender_id": str(sender["id"]),
        "is_verified": bool(existing.get("is_verified")),
    }
    if not update_mode:
        changes["sender_email"] = email
        changes["sender_name"] = name
    save_settings(store, company_id, **changes)

    logger.info(
        "verification.sender.created",
        extra={"company_id": company_id, "sender": mask_email(email), "update_mode": update_mode},
    )
    return {
        "senderId": sender["id"],
        "spfError": sender["spfError"],
        "dkimError": sender["dkimError"],
    }


async def validate_otp(
    ctx: AuthContext,
    client: SenderVerificationClient,
    company_id: str,
    otp: Any,
    email: Optional[str] = None,
    name: Optional[str] = None,
) -> None:
    if not otp:
        raise ValidationError("OTP is required")
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)

    store = ctx.store
    settings = store.get_verification_settings(company_id)
    if not settings or not settings.get("sender_id"):
        raise ValidationError("Verification settings not found. Please create sender first.")

    await client.validate_otp(settings["sender_id"], str(otp))

    changes: dict[str, Any] = {"is_verified": True}
    if email and name:
        changes["sender_email"] = email
        changes["sender_name"] = name
    save_settings(store, company_id, **changes)

    logger.info("verification.sender.verified", extra={"company_id": company_id})


def complete_prevention_step(ctx: AuthContext, company_id: str, step: Any) -> dict[str, bool]:
    """Mark prevention step 2 or 3 complete (any order)."""
    if isinstance(step, bool) or step not in PREVENTION_STEPS:
        raise ValidationError("Step must be 2 or 3")
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)

    store = ctx.store
    settings = store.get_verification_settings(company_id)
    if not settings:
        raise ValidationError("Verification settings not found. Please complete step 1 first.")

    steps = {**default_prevention_steps(), **(settings.get("prevention_steps") or {})}
    steps[f"step{step}"] = True
    saved = save_settings(store, company_id, prevention_steps=steps)

    logger.info("verification.step.completed", extra={"company_id": company_id, "step": step})
    return saved.get("prevention_steps") or steps


def get_email_template(ctx: AuthContext, company_id: str) -> Optional[str]:
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)
    settings = ctx.store.get_verification_settings(company_id) or {}
    return settings.get("email_template")


def update_email_template(ctx: AuthContext, company_id: str, template: Any) -> Optional[str]:
    if template is None:
        raise ValidationError("Email template is required")
    if not isinstance(template, str):
        raise ValidationError("Email template must be a string")
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)

    saved = save_settings(ctx.store, company_id, email_template=template)
    logger.info("verification.template.updated", extra={"company_id": company_id})
    return saved.get("email_template")
