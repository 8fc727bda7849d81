"""Invitation lifecycle: create -> accept / cancel / expire.

Covers:
- Tokens are 64 hex chars and never returned by the API
- Failed email delivery removes the invitation
- Acceptance requires a matching email and an open invitation
- End to end: invite, sign in as the invitee, accept, appear in the member list
"""

import re
from datetime import timedelta

import pytest

from store_fakes import add_user
from unshared_api.utils.timestamps import parse_timestamp, utc_now


def _invite(client, admin, email="new.hire@acme.test", role="member"):
    return client.post(
        "/api/companies/members",
        json={"email": email, "companyRole": role},
        headers=admin.headers,
    )


def _stored(store, email):
    return next(inv for inv in store.invitations.values() if inv["email"] == email)


# ============================================================================
# Create
# ============================================================================


def test_invite_creates_invitation_and_sends_email(client, store, mailer, admin):
    response = _invite(client, admin, email="  New.Hire@Acme.test ")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Invitation sent successfully"
    assert "token" not in body["invitation"]
    assert body["invitation"]["email"] == "new.hire@acme.test"
    assert body["invitation"]["company_role"] == "member"

    stored = _stored(store, "new.hire@acme.test")
    assert re.fullmatch(r"[0-9a-f]{64}", stored["token"])
    assert stored["role"] == "client"
    lifetime = parse_timestamp(stored["expires_at"]) - parse_timestamp(stored["created_at"])
    assert lifetime == timedelta(days=7)

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "new.hire@acme.test"
    assert mailer.sent[0]["token"] == stored["token"]
    assert mailer.sent[0]["company_name"] == "Acme Streaming"
    assert mailer.sent[0]["inviter_name"] == "Ada Admin"


def test_unknown_role_is_invited_as_member(client, store, admin):
    _invite(client, admin, role="owner")
    assert _stored(store, "new.hire@acme.test")["company_role"] == "member"


def test_invite_email_failure_removes_invitation(client, store, mailer, admin):
    mailer.fail_with = "Email service not configured"

    response = _invite(client, admin)

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to send invitation email"
    assert store.invitations == {}


def test_invite_existing_member_rejected(client, store, admin, member):
    response = _invite(client, admin, email="MEMBER@acme.test")
    assert response.status_code == 400
    assert response.json()["error"] == "User is already a member of this company"
    assert store.invitations == {}


def test_invite_requires_email(client, admin):
    response = client.post("/api/companies/members", json={}, headers=admin.headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Email is required"


def test_member_cannot_invite(client, member):
    response = _invite(client, member)
    assert response.status_code == 403
    assert response.json()["error"] == "Only company admins can invite members"


# ============================================================================
# Accept
# ============================================================================


def test_invite_then_accept_end_to_end(client, store, auth_provider, mailer, company, admin):
    _invite(client, admin, role="admin")
    token = mailer.sent[0]["token"]
    invitee = add_user(store, auth_provider, email="New.Hire@acme.test")

    pending = client.get("/api/invite/pending", headers=invitee.headers).json()["invitations"]
    assert len(pending) == 1
    assert pending[0]["companyName"] == "Acme Streaming"
    assert pending[0]["company_id"] == company["id"]
    assert pending[0]["company_role"] == "admin"

    response = client.post("/api/invite/accept", json={"token": token}, headers=invitee.headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Invitation accepted successfully"
    assert body["company"] == {"id": company["id"], "name": "Acme Streaming"}
    assert body["user"] == {"companyId": company["id"], "role": "client", "companyRole": "admin"}

    listed = client.get("/api/companies/members", headers=admin.headers).json()
    assert "new.hire@acme.test" in [m["email"] for m in listed["members"]]
    assert listed["invitations"] == []
    assert _stored(store, "new.hire@acme.test")["accepted_at"] is not None

    again = client.post("/api/invite/accept", json={"token": token}, headers=invitee.headers)
    assert again.status_code == 400
    assert again.json()["error"] == "This invitation has already been accepted"


def test_accept_with_other_email_is_forbidden(client, store, mailer, admin, outsider):
    _invite(client, admin)
    token = mailer.sent[0]["token"]

    response = client.post("/api/invite/accept", json={"token": token}, headers=outsider.headers)

    assert response.status_code == 403
    assert response.json()["error"] == "This invitation was sent to a different email address"
    assert store.profiles[outsider.profile["id"]]["company_id"] is None


def test_accept_expired_invitation(client, store, auth_provider, mailer, admin):
    _invite(client, admin)
    stored = _stored(store, "new.hire@acme.test")
    stored["expires_at"] = (utc_now() - timedelta(minutes=1)).isoformat()
    invitee = add_user(store, auth_provider, email="new.hire@acme.test")

    response = client.post(
        "/api/invite/accept", json={"token": stored["token"]}, headers=invitee.headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "This invitation has expired"


@pytest.mark.parametrize(
    "payload,status,error",
    [
        ({}, 400, "Invitation token is required"),
        ({"token": "f" * 64}, 404, "Invitation not found"),
    ],
)
def test_accept_bad_token(client, outsider, payload, status, error):
    response = client.post("/api/invite/accept", json=payload, headers=outsider.headers)
    assert response.status_code == status
    assert response.json()["error"] == error


def test_super_admin_keeps_global_role_on_accept(client, store, mailer, admin, super_admin):
    _invite(client, admin, email="root@unshared.test")
    token = mailer.sent[0]["token"]

    response = client.post("/api/invite/accept", json={"token": token}, headers=super_admin.headers)

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "super_admin"
    assert store.profiles[super_admin.profile["id"]]["role"] == "super_admin"


# ============================================================================
# Details / cancel
# ============================================================================


def test_invitation_details_is_public(client, mailer, admin):
    _invite(client, admin)
    token = mailer.sent[0]["token"]

    response = client.get("/api/invite/details", params={"token": token})

    assert response.status_code == 200
    invitation = response.json()["invitation"]
    assert invitation["email"] == "new.hire@acme.test"
    assert invitation["companyName"] == "Acme Streaming"
    assert invitation["companyRole"] == "member"


def test_invitation_details_errors(client):
    assert client.get("/api/invite/details").status_code == 400
    missing = client.get("/api/invite/details", params={"token": "0" * 64})
    assert missing.status_code == 404
    assert missing.json()["error"] == "Invalid invitation"


def test_cancel_invitation(client, store, admin):
    _invite(client, admin)
    invitation_id = _stored(store, "new.hire@acme.test")["id"]

    response = client.delete(
        "/api/invite/cancel", params={"invitationId": invitation_id}, headers=admin.headers
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Invitation cancelled successfully"
    assert store.invitations == {}


def test_cancel_requires_admin_of_that_company(client, store, auth_provider, admin):
    _invite(client, admin)
    invitation_id = _stored(store, "new.hire@acme.test")["id"]
    other = store.insert_company({"name": "Other"})
    foreign_admin = add_user(
        store, auth_provider, email="boss@other.test", company_id=other["id"], company_role="admin"
    )

    response = client.delete(
        "/api/invite/cancel", params={"invitationId": invitation_id}, headers=foreign_admin.headers
    )

    assert response.status_code == 403
    assert invitation_id in store.invitations


def test_cancel_requires_id(client, admin):
    response = client.delete("/api/invite/cancel", headers=admin.headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Invitation ID is required"
