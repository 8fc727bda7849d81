"""Super-admin fleet view."""

import pytest


def test_admin_lists_companies(client, store, company, super_admin):
    store.insert_company({"name": "Newer Co"})

    response = client.get("/api/admin/companies", headers=super_admin.headers)

    assert response.status_code == 200
    assert [c["name"] for c in response.json()["companies"]] == ["Newer Co", "Acme Streaming"]


def test_admin_reads_company_and_clients(client, company, admin, member, super_admin):
    detail = client.get(f"/api/admin/companies/{company['id']}", headers=super_admin.headers)
    assert detail.json()["company"]["name"] == "Acme Streaming"

    clients = client.get(
        f"/api/admin/companies/{company['id']}/clients", headers=super_admin.headers
    ).json()["clients"]
    assert [c["email"] for c in clients] == ["admin@acme.test", "member@acme.test"]


def test_admin_unknown_company(client, super_admin):
    response = client.get("/api/admin/companies/missing/clients", headers=super_admin.headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Company not found"


@pytest.mark.parametrize("path", ["/api/admin/companies", "/api/admin/companies/x"])
def test_admin_routes_reject_company_admins(client, admin, path):
    response = client.get(path, headers=admin.headers)
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized - Super admin access required"
