"""Invitation endpoints.

- POST   /api/invite/accept                   accept (session; email must match)
- DELETE /api/invite/cancel?invitationId=     cancel (company admin)
- GET    /api/invite/details?token=           public preview for the signup page
- GET    /api/invite/pending                  open invitations for the caller's email

Creating invitations lives in routers.members (POST /api/companies/members).
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from unshared_api.auth.session_auth import AuthContext, get_auth_context
from unshared_api.db.store import SupabaseStore, get_store
from unshared_api.schemas import AcceptInvitationRequest
from unshared_api.services import invitations

router = APIRouter(prefix="/api/invite", tags=["invitations"])


@router.post("/accept")
async def accept_invitation(
    payload: AcceptInvitationRequest, ctx: AuthContext = Depends(get_auth_context)
) -> dict[str, Any]:
    result = invitations.accept_invitation(ctx, payload.token)
    return {"success": True, "message": "Invitation accepted successfully", **result}


@router.delete("/cancel")
async def cancel_invitation(
    invitation_id: Optional[str] = Query(default=None, alias="invitationId"),
    ctx: AuthContext = Depends(get_auth_context),
) -> dict[str, Any]:
    invitations.cancel_invitation(ctx, invitation_id)
    return {"success": True, "message": "Invitation cancelled successfully"}


@router.get("/details")
async def invitation_details(
    token: Optional[str] = None, store: SupabaseStore = Depends(get_store)
) -> dict[str, Any]:
    return {"success": True, "invitation": invitations.invitation_details(store, token)}


@router.get("/pending")
async def pending_invitations(ctx: AuthContext = Depends(get_auth_context)) -> dict[str, Any]:
    pending = invitations.pending_for_user(ctx.store, ctx.profile_email)
    return {"success": True, "invitations": pending}
