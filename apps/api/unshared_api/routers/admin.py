"""Super-admin endpoints (read-only fleet view).

- GET /api/admin/companies
- GET /api/admin/companies/{company_id}
- GET /api/admin/companies/{company_id}/clients

SECURITY:
- require_super_admin: profile role must be "super_admin" (403 otherwise)
"""

from typing import Any

from fastapi import APIRouter, Depends

from unshared_api.auth.session_auth import AuthContext, require_super_admin
from unshared_api.services import admin

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/companies")
async def list_companies(ctx: AuthContext = Depends(require_super_admin)) -> dict[str, Any]:
    return {"success": True, "companies": admin.list_companies(ctx.store)}


@router.get("/companies/{company_id}")
async def get_company(
    company_id: str, ctx: AuthContext = Depends(require_super_admin)
) -> dict[str, Any]:
    return {"success": True, "company": admin.get_company(ctx.store, company_id)}


@router.get("/companies/{company_id}/clients")
async def list_clients(
    company_id: str, ctx: AuthContext = Depends(require_super_admin)
) -> dict[str, Any]:
    return {"success": True, "clients": admin.list_company_clients(ctx.store, company_id)}
