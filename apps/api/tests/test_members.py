"""Company membership: list, edit, remove, last-admin protection."""

import pytest

from store_fakes import add_user


@pytest.fixture
def second_admin(store, auth_provider, company):
    return add_user(
        store,
        auth_provider,
        email="second@acme.test",
        company_id=company["id"],
        company_role="admin",
    )


def test_members_route_is_not_a_company_id(client, company, admin, member):
    response = client.get("/api/companies/members", headers=admin.headers)

    assert response.status_code == 200
    body = response.json()
    assert body["company"]["id"] == company["id"]
    assert [m["email"] for m in body["members"]] == ["admin@acme.test", "member@acme.test"]
    assert body["invitations"] == []


def test_list_members_without_company(client, outsider):
    response = client.get("/api/companies/members", headers=outsider.headers)
    assert response.status_code == 403
    assert response.json()["error"] == "You must create a company first"


# ============================================================================
# Edit
# ============================================================================


def test_member_can_rename_self(client, store, member):
    response = client.patch(
        f"/api/companies/members/{member.profile['id']}",
        json={"name": "  Maxine  "},
        headers=member.headers,
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Member updated successfully"
    assert store.profiles[member.profile["id"]]["name"] == "Maxine"


def test_member_cannot_edit_others(client, admin, member):
    response = client.patch(
        f"/api/companies/members/{admin.profile['id']}",
        json={"name": "Renamed"},
        headers=member.headers,
    )
    assert response.status_code == 403
    assert response.json()["error"] == "Only company admins can edit other members"


def test_member_cannot_change_own_role(client, member):
    response = client.patch(
        f"/api/companies/members/{member.profile['id']}",
        json={"company_role": "admin"},
        headers=member.headers,
    )
    assert response.status_code == 403
    assert response.json()["error"] == "Only company admins can change roles"


def test_admin_promotes_member(client, store, admin, member):
    response = client.patch(
        f"/api/companies/members/{member.profile['id']}",
        json={"companyRole": "admin"},
        headers=admin.headers,
    )
    assert response.status_code == 200
    assert response.json()["member"]["company_role"] == "admin"
    assert store.profiles[member.profile["id"]]["company_role"] == "admin"


@pytest.mark.parametrize(
    "payload,error",
    [
        ({}, "At least one field (name or company_role) is required"),
        ({"company_role": "owner"}, "Invalid company_role. Must be 'admin' or 'member'"),
    ],
)
def test_update_member_validation(client, admin, member, payload, error):
    response = client.patch(
        f"/api/companies/members/{member.profile['id']}", json=payload, headers=admin.headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == error


def test_last_admin_cannot_be_demoted(client, store, admin):
    response = client.patch(
        f"/api/companies/members/{admin.profile['id']}",
        json={"company_role": "member"},
        headers=admin.headers,
    )

    assert response.status_code == 400
    assert response.json()["error"] == (
        "Cannot remove the last admin. Promote another member to admin first."
    )
    assert store.profiles[admin.profile["id"]]["company_role"] == "admin"


def test_admin_demotes_self_when_another_admin_exists(client, store, admin, second_admin):
    response = client.patch(
        f"/api/companies/members/{admin.profile['id']}",
        json={"company_role": "member", "name": "Ada"},
        headers=admin.headers,
    )

    assert response.status_code == 200
    member = response.json()["member"]
    assert member["company_role"] == "member"
    assert member["name"] == "Ada"
    assert store.profiles[second_admin.profile["id"]]["company_role"] == "admin"


def test_member_of_other_company_is_not_found(client, store, auth_provider, admin):
    other = store.insert_company({"name": "Other"})
    stranger = add_user(store, auth_provider, email="s@other.test", company_id=other["id"])

    response = client.patch(
        f"/api/companies/members/{stranger.profile['id']}",
        json={"name": "x"},
        headers=admin.headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Member not found or does not belong to your company"


# ============================================================================
# Remove
# ============================================================================


def test_admin_removes_member(client, store, admin, member):
    response = client.delete(
        f"/api/companies/members/{member.profile['id']}", headers=admin.headers
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Member removed successfully"
    profile = store.profiles[member.profile["id"]]
    assert profile["company_id"] is None
    assert profile["company_role"] == "member"


def test_admin_cannot_remove_self(client, admin):
    response = client.delete(f"/api/companies/members/{admin.profile['id']}", headers=admin.headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot remove yourself from the company"


def test_member_cannot_remove(client, store, admin, member):
    response = client.delete(f"/api/companies/members/{admin.profile['id']}", headers=member.headers)
    assert response.status_code == 403
    assert store.profiles[admin.profile["id"]]["company_id"] is not None
