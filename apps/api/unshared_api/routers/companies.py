"""Company endpoints.

- GET    /api/companies                       list (own company, or all for super admin)
- POST   /api/companies                       create; caller becomes admin
- DELETE /api/companies                       delete the caller's company (admin)
- GET    /api/companies/{company_id}          read (member or super admin)
- PATCH  /api/companies/{company_id}          update name / website (admin)
- GET    /api/companies/{company_id}/onboarding
- PUT    /api/companies/{company_id}/onboarding
- DELETE /api/companies/{company_id}/onboarding   reset (admin)
- GET    /api/companies/{company_id}/api-key
- POST   /api/companies/{company_id}/api-key      issue the company key (admin)

AUTHENTICATION:
- Session (Supabase JWT), resolved by get_auth_context
"""

from typing import Any

from fastapi import APIRouter, Depends, status

from unshared_api.auth.session_auth import AuthContext, get_auth_context
from unshared_api.schemas import (
    CompanyCreateRequest,
    CompanyUpdateRequest,
    OnboardingUpdateRequest,
)
from unshared_api.services import api_keys, companies, onboarding

router = APIRouter(prefix="/api/companies", tags=["companies"])


# ============================================================================
# Company CRUD
# ============================================================================


@router.get("")
async def list_companies(ctx: AuthContext = Depends(get_auth_context)) -> dict[str, Any]:
    return {"success": True, "companies": companies.list_companies(ctx)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreateRequest, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    company = companies.create_company(ctx, payload.name, payload.website_url)
    return {"success": True, "company": company}


@router.delete("")
async def delete_company(ctx: AuthContext = Depends(get_auth_context)) -> dict[str, Any]:
    companies.delete_company(ctx)
    return {"success": True, "message": "Company deleted successfully"}


@router.get("/{company_id}")
async def get_company(
    company_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    return {"success": True, "company": companies.get_company(ctx, company_id)}


@router.patch("/{company_id}")
async def update_company(
    company_id: str,
    payload: CompanyUpdateRequest,
    ctx: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    company = companies.update_company(ctx, company_id, payload.name, payload.website_url)
    return {"success": True, "company": company}


# ============================================================================
# Onboarding
# ============================================================================


@router.get("/{company_id}/onboarding")
async def get_onboarding(
    company_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    return {"success": True, **onboarding.get_onboarding(ctx, company_id)}


@router.put("/{company_id}/onboarding")
async def update_onboarding(
    company_id: str,
    payload: OnboardingUpdateRequest,
    ctx: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    record = onboarding.update_onboarding(ctx, company_id, payload.state, payload.completed)
    return {"success": True, **record}


@router.delete("/{company_id}/onboarding")
async def reset_onboarding(
    company_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    onboarding.reset_onboarding(ctx, company_id)
    return {"success": True, "message": "Onboarding reset successfully"}


# ============================================================================
# API key
# ============================================================================


@router.get("/{company_id}/api-key")
async def get_api_key(
    company_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    return {"success": True, "data": api_keys.get_api_key(ctx, company_id)}


@router.post("/{company_id}/api-key")
async def create_api_key(
    company_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    return {"success": True, "data": api_keys.create_api_key(ctx, company_id)}
