"""Sender and domain verification endpoints.

- GET  /api/companies/{company_id}/verification                      settings or null (member)
- POST /api/companies/{company_id}/verification                      save sender fields (admin)
- POST /api/companies/{company_id}/verification/sender               create sender, send OTP
- POST /api/companies/{company_id}/verification/otp                  validate OTP
- PUT  /api/companies/{company_id}/verification/steps                mark step 2 or 3
- GET  /api/companies/{company_id}/verification/domain               Brevo domain status
- POST /api/companies/{company_id}/verification/domain               register domain
- PUT  /api/companies/{company_id}/verification/domain/authenticate  DNS check
- GET  /api/companies/{company_id}/verification/email-template
- PUT  /api/companies/{company_id}/verification/email-template
"""

from typing import Any

from fastapi import APIRouter, Depends

from unshared_api.auth.session_auth import AuthContext, get_auth_context
from unshared_api.integrations.brevo import BrevoClient, get_brevo_client
from unshared_api.integrations.sender_service import SenderVerificationClient, get_sender_client
from unshared_api.schemas import (
    DomainRequest,
    EmailTemplateRequest,
    OtpValidateRequest,
    SenderCreateRequest,
    StepCompleteRequest,
    VerificationSettingsRequest,
)
from unshared_api.services import domains, verification

router = APIRouter(
    prefix="/api/companies/{company_id}/verification", tags=["verification"]
)


# ============================================================================
# Sender identity
# ============================================================================


@router.get("")
async def get_settings(
    company_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    return {"success": True, "data": verification.get_settings(ctx, company_id)}


@router.post("")
async def save_settings(
    company_id: str,
    payload: VerificationSettingsRequest,
    ctx: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    saved = verification.update_settings(
        ctx,
        company_id,
        sender_email=payload.sender_email,
        sender_name=payload.sender_name,
        is_verified=payload.is_verified,
    )
    return {"success": True, "data": saved}


@router.post("/sender")
async def create_sender(
    company_id: str,
    payload: SenderCreateRequest,
    ctx: AuthContext = Depends(get_auth_context),
    client: SenderVerificationClient = Depends(get_sender_client),
) -> dict[str, Any]:
    result = await verification.create_sender(
        ctx, client, company_id, payload.email, payload.name, payload.update_mode
    )
    return {
        "success": True,
        "message": "Sender created. Check your inbox for the verification code.",
        "data": result,
    }


@router.post("/otp")
async def validate_otp(
    company_id: str,
    payload: OtpValidateRequest,
    ctx: AuthContext = Depends(get_auth_context),
    client: SenderVerificationClient = Depends(get_sender_client),
) -> dict[str, Any]:
    await verification.validate_otp(
        ctx, client, company_id, payload.otp, payload.email, payload.name
    )
    return {"success": True, "message": "Account verification successful"}


@router.put("/steps")
async def complete_step(
    company_id: str,
    payload: StepCompleteRequest,
    ctx: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    steps = verification.complete_prevention_step(ctx, company_id, payload.step)
    return {
        "success": True,
        "message": f"Step {payload.step} marked as complete",
        "data": {"prevention_steps": steps},
    }


# ============================================================================
# Domain
# ============================================================================


@router.get("/domain")
async def domain_status(
    company_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    brevo: BrevoClient = Depends(get_brevo_client),
) -> dict[str, Any]:
    return {"success": True, "data": await domains.domain_status(ctx, brevo, company_id)}


@router.post("/domain")
async def register_domain(
    company_id: str,
    payload: DomainRequest,
    ctx: AuthContext = Depends(get_auth_context),
    brevo: BrevoClient = Depends(get_brevo_client),
) -> dict[str, Any]:
    result = await domains.register_domain(ctx, brevo, company_id, payload.domain)
    return {"success": True, **result}


@router.put("/domain/authenticate")
async def authenticate_domain(
    company_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    brevo: BrevoClient = Depends(get_brevo_client),
) -> dict[str, Any]:
    result = await domains.authenticate_domain(ctx, brevo, company_id)
    return {"success": True, **result}


# ============================================================================
# Email template
# ============================================================================


@router.get("/email-template")
async def get_email_template(
    company_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    template = verification.get_email_template(ctx, company_id)
    return {"success": True, "data": {"email_template": template}}


@router.put("/email-template")
async def update_email_template(
    company_id: str,
    payload: EmailTemplateRequest,
    ctx: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    template = verification.update_email_template(ctx, company_id, payload.email_template)
    return {
        "success": True,
        "message": "Email template saved successfully",
        "data": {"email_template": template},
    }
