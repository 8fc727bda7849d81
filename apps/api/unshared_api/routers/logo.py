"""Company logo endpoints.

- POST   /api/companies/{company_id}/logo   multipart field "logo" (admin)
- DELETE /api/companies/{company_id}/logo   remove logo (admin)

Limits: 1 MB; PNG, SVG, JPEG, WebP.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from unshared_api.auth.session_auth import AuthContext, get_auth_context
from unshared_api.errors import ValidationError
from unshared_api.services import logos
from unshared_api.storage.logo_storage import LogoStorage, get_logo_storage

router = APIRouter(prefix="/api/companies/{company_id}/logo", tags=["logo"])


@router.post("")
async def upload_logo(
    company_id: str,
    logo: Optional[UploadFile] = File(default=None),
    ctx: AuthContext = Depends(get_auth_context),
    storage: LogoStorage = Depends(get_logo_storage),
) -> dict[str, Any]:
    if logo is None:
        raise ValidationError("No file provided")

    file = logos.LogoFile(
        filename=logo.filename,
        content_type=logo.content_type,
        content=await logo.read(),
    )
    result = logos.upload_logo(ctx, storage, company_id, file)
    return {"success": True, "logoUrl": result["logo_url"], "company": result["company"]}


@router.delete("")
async def delete_logo(
    company_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    storage: LogoStorage = Depends(get_logo_storage),
) -> dict[str, Any]:
    company = logos.delete_logo(ctx, storage, company_id)
    return {"success": True, "company": company}
