"""Dashboard data endpoints.

- GET  /api/companies/{company_id}/data                     current data (session)
- POST /api/companies/{company_id}/data                     ingest (service key)
- GET  /api/companies/{company_id}/data/history             ?limit=&offset=
- GET  /api/companies/{company_id}/data/history/{version}   one snapshot
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends

from unshared_api.auth.service_key import require_service_key
from unshared_api.auth.session_auth import AuthContext, get_auth_context
from unshared_api.db.store import SupabaseStore, get_store
from unshared_api.schemas import CompanyDataRequest
from unshared_api.services import company_data

router = APIRouter(prefix="/api/companies/{company_id}/data", tags=["company-data"])


@router.get("")
async def get_data(
    company_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    current = company_data.get_current_data(ctx, company_id)
    if current is None:
        return {"success": True, "data": None, "message": "No data available for this company"}
    return {"success": True, **current}


@router.post("", dependencies=[Depends(require_service_key)])
async def ingest_data(
    company_id: str,
    payload: CompanyDataRequest,
    store: SupabaseStore = Depends(get_store),
) -> dict[str, Any]:
    result = company_data.ingest_data(store, company_id, payload.data)
    return {"success": True, "message": "Company data updated successfully", **result}


@router.get("/history")
async def get_history(
    company_id: str,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    ctx: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    page_limit, page_offset = company_data.parse_paging(limit, offset)
    return {"success": True, **company_data.get_history(ctx, company_id, page_limit, page_offset)}


@router.get("/history/{version}")
async def get_version(
    company_id: str, version: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    return {"success": True, "data": company_data.get_version(ctx, company_id, version)}
