"""Company membership endpoints (the caller's own company).

- GET    /api/companies/members              company, members, open invitations
- POST   /api/companies/members              invite by email (admin)
- PATCH  /api/companies/members/{member_id}  rename / change role
- DELETE /api/companies/members/{member_id}  detach member (admin)

Registered before the /api/companies/{company_id} routes so "members" is
never read as a company id.
"""

from typing import Any

from fastapi import APIRouter, Depends

from unshared_api.auth.session_auth import AuthContext, get_auth_context
from unshared_api.schemas import InviteMemberRequest, UpdateMemberRequest
from unshared_api.services import invitations, members
from unshared_api.services.email import InviteMailer, get_invite_mailer

router = APIRouter(prefix="/api/companies/members", tags=["members"])


@router.get("")
async def list_members(ctx: AuthContext = Depends(get_auth_context)) -> dict[str, Any]:
    return {"success": True, **members.list_members(ctx)}


@router.post("")
async def invite_member(
    payload: InviteMemberRequest,
    ctx: AuthContext = Depends(get_auth_context),
    mailer: InviteMailer = Depends(get_invite_mailer),
) -> dict[str, Any]:
    invitation = await invitations.create_invitation(
        ctx, mailer, payload.email, payload.company_role
    )
    return {
        "success": True,
        "message": "Invitation sent successfully",
        "invitation": invitation,
    }


@router.patch("/{member_id}")
async def update_member(
    member_id: str,
    payload: UpdateMemberRequest,
    ctx: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    member = members.update_member(ctx, member_id, payload.name, payload.company_role)
    return {"success": True, "message": "Member updated successfully", "member": member}


@router.delete("/{member_id}")
async def remove_member(
    member_id: str, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    members.remove_member(ctx, member_id)
    return {"success": True, "message": "Member removed successfully"}
