"""Company lifecycle: create / list / read / update / delete.

Covers:
- Blank names are rejected before any store call
- Creator becomes company admin
- Membership and super-admin read rules
- Deleting a company detaches every member
"""

from store_fakes import add_user


# ============================================================================
# Create
# ============================================================================


def test_create_company_makes_caller_admin(client, store, outsider):
    response = client.post(
        "/api/companies",
        json={"name": "  Globex  ", "websiteUrl": " https://globex.test "},
        headers=outsider.headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["company"]["name"] == "Globex"
    assert body["company"]["website_url"] == "https://globex.test"

    profile = store.profiles[outsider.profile["id"]]
    assert profile["company_id"] == body["company"]["id"]
    assert profile["company_role"] == "admin"


def test_create_company_blank_name_touches_nothing(client, store, outsider):
    store.calls.clear()

    response = client.post("/api/companies", json={"name": "   "}, headers=outsider.headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Company name is required"
    assert "companies.insert" not in store.calls
    assert store.companies == {}


def test_create_company_rejected_when_already_member(client, store, admin):
    response = client.post("/api/companies", json={"name": "Second"}, headers=admin.headers)

    assert response.status_code == 400
    assert response.json()["error"] == "You already belong to a company"
    assert len(store.companies) == 1


def test_create_company_rolls_back_when_link_fails(client, store, outsider):
    store.fail.add("profiles.update")

    response = client.post("/api/companies", json={"name": "Orphan"}, headers=outsider.headers)

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to link company to profile"
    assert store.companies == {}


# ============================================================================
# List / read
# ============================================================================


def test_list_companies_scoped_to_membership(client, store, member, outsider, super_admin):
    store.insert_company({"name": "Other Co"})

    own = client.get("/api/companies", headers=member.headers).json()["companies"]
    assert [c["name"] for c in own] == ["Acme Streaming"]

    assert client.get("/api/companies", headers=outsider.headers).json()["companies"] == []

    everything = client.get("/api/companies", headers=super_admin.headers).json()["companies"]
    assert {c["name"] for c in everything} == {"Acme Streaming", "Other Co"}


def test_get_company_requires_membership(client, store, company, member, outsider):
    assert client.get(f"/api/companies/{company['id']}", headers=member.headers).status_code == 200

    response = client.get(f"/api/companies/{company['id']}", headers=outsider.headers)
    assert response.status_code == 403
    assert response.json() == {
        "success": False,
        "error": "Unauthorized - You do not have access to this company",
    }


def test_super_admin_reads_any_company(client, company, super_admin):
    response = client.get(f"/api/companies/{company['id']}", headers=super_admin.headers)
    assert response.status_code == 200
    assert response.json()["company"]["id"] == company["id"]

    missing = client.get("/api/companies/does-not-exist", headers=super_admin.headers)
    assert missing.status_code == 404
    assert missing.json()["error"] == "Company not found"


# ============================================================================
# Update
# ============================================================================


def test_update_company_admin_only(client, company, admin, member):
    denied = client.patch(
        f"/api/companies/{company['id']}", json={"name": "Hacked"}, headers=member.headers
    )
    assert denied.status_code == 403
    assert denied.json()["error"] == "Only company admins can update company details"

    response = client.patch(
        f"/api/companies/{company['id']}",
        json={"name": "Acme Media", "website_url": ""},
        headers=admin.headers,
    )
    assert response.status_code == 200
    assert response.json()["company"]["name"] == "Acme Media"
    assert response.json()["company"]["website_url"] is None


def test_update_company_blank_name(client, company, admin):
    response = client.patch(
        f"/api/companies/{company['id']}", json={"name": ""}, headers=admin.headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Company name is required"


# ============================================================================
# Delete
# ============================================================================


def test_delete_company_detaches_every_member(client, store, company, admin, member):
    response = client.delete("/api/companies", headers=admin.headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Company deleted successfully"}
    assert company["id"] not in store.companies
    for person in (admin, member):
        profile = store.profiles[person.profile["id"]]
        assert profile["company_id"] is None
        assert profile["company_role"] == "member"

    for person in (admin, member):
        former = client.get(f"/api/companies/{company['id']}", headers=person.headers)
        assert former.status_code == 403


def test_delete_company_requires_admin(client, store, company, member):
    response = client.delete("/api/companies", headers=member.headers)

    assert response.status_code == 403
    assert response.json()["error"] == "Only company admins can delete the company"
    assert company["id"] in store.companies


def test_delete_company_without_company(client, outsider):
    response = client.delete("/api/companies", headers=outsider.headers)
    assert response.status_code == 404


# ============================================================================
# Authentication
# ============================================================================


def test_missing_token_is_401(client):
    response = client.get("/api/companies")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Not authenticated"}


def test_unknown_token_is_401(client):
    response = client.get("/api/companies", headers={"Authorization": "Bearer forged"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid session"


def test_session_cookie_authenticates(client, member):
    client.cookies.set("sb-access-token", member.token)
    try:
        response = client.get("/api/companies")
    finally:
        client.cookies.clear()
    assert response.status_code == 200


def test_missing_profile_is_404(client, store, auth_provider):
    ghost = add_user(store, auth_provider, email="ghost@acme.test")
    del store.profiles[ghost.profile["id"]]

    response = client.get("/api/companies", headers=ghost.headers)
    assert response.status_code == 404
    assert response.json()["error"] == "User profile not found"
