"""Company API key issuance: one key per company, admin only."""

import re


def _url(company):
    return f"/api/companies/{company['id']}/api-key"


def test_no_key_yet(client, company, member):
    response = client.get(_url(company), headers=member.headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None}


def test_admin_creates_key_once(client, store, company, admin, member):
    response = client.post(_url(company), headers=admin.headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert re.fullmatch(r"usk_[0-9a-f]{64}", data["apiKey"])
    assert data["createdAt"]

    # members can read it back
    read = client.get(_url(company), headers=member.headers).json()["data"]
    assert read["apiKey"] == data["apiKey"]

    second = client.post(_url(company), headers=admin.headers)
    assert second.status_code == 400
    assert second.json()["error"] == (
        "API key already exists. Only one API key can be generated per company."
    )
    assert store.api_keys[company["id"]]["api_key"] == data["apiKey"]


def test_concurrent_insert_hits_unique_constraint(client, store, company, admin, monkeypatch):
    # first lookup misses, the insert still collides with a racing request
    store.api_keys[company["id"]] = {"company_id": company["id"], "api_key": "usk_racer"}
    monkeypatch.setattr(store, "get_api_key", lambda company_id: None)

    response = client.post(_url(company), headers=admin.headers)

    assert response.status_code == 400
    assert store.api_keys[company["id"]]["api_key"] == "usk_racer"


def test_member_cannot_create_key(client, company, member):
    response = client.post(_url(company), headers=member.headers)
    assert response.status_code == 403
    assert response.json()["error"] == "Only company admins can generate API keys"


def test_outsider_cannot_read_key(client, company, outsider, super_admin):
    for caller in (outsider, super_admin):
        response = client.get(_url(company), headers=caller.headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Unauthorized - You do not have access to this company"
