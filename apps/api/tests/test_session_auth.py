"""Account endpoints: signup, signin, signout, me."""

import pytest

from store_fakes import add_user


def _signup(client, **fields):
    payload = {"email": "founder@globex.test", "password": "s3cret-pass", **fields}
    return client.post("/api/auth/signup", json=payload)


# ============================================================================
# Signup
# ============================================================================


def test_signup_creates_profile_and_company(client, store, auth_provider):
    response = _signup(client, name="Fran", companyName=" Globex ", email="Founder@Globex.test")

    assert response.status_code == 201
    body = response.json()
    assert body["session"] is None
    user = body["user"]
    assert user["email"] == "founder@globex.test"
    assert user["name"] == "Fran"
    assert user["role"] == "client"

    company = store.companies[user["companyId"]]
    assert company["name"] == "Globex"
    profile = store.get_profile_by_user_id(user["id"])
    assert profile["email"] == "founder@globex.test"
    assert profile["company_id"] == company["id"]

    assert auth_provider.sign_up_calls[0]["redirect_to"] == "http://localhost:3000/auth/callback"


def test_signup_joins_existing_company_by_name(client, store, company):
    response = _signup(client, companyName="Acme Streaming")
    assert response.json()["user"]["companyId"] == company["id"]
    assert len(store.companies) == 1


def test_signup_with_invite_defers_company(client, store, auth_provider, monkeypatch):
    monkeypatch.setenv("SITE_URL", "https://app.unshared.test/")

    response = _signup(client, companyName="Ignored", inviteToken="ab" * 32)

    assert response.json()["user"]["companyId"] is None
    assert store.companies == {}
    assert auth_provider.sign_up_calls[0]["redirect_to"] == (
        f"https://app.unshared.test/auth/callback?invite={'ab' * 32}"
    )


@pytest.mark.parametrize(
    "fields,error",
    [
        ({"password": ""}, "Email and password are required"),
        ({"email": "not-an-email"}, "Invalid email format"),
        ({"password": "short"}, "Password must be at least 8 characters"),
    ],
)
def test_signup_validation(client, auth_provider, fields, error):
    response = _signup(client, **fields)
    assert response.status_code == 400
    assert response.json()["error"] == error
    assert auth_provider.sign_up_calls == []


def test_signup_duplicate_email(client):
    _signup(client)
    response = _signup(client)
    assert response.status_code == 400
    assert response.json()["error"] == (
        "An account with this email already exists. Please sign in instead."
    )


def test_signup_survives_profile_insert_failure(client, store):
    store.fail.add("profiles.insert")
    response = _signup(client)
    assert response.status_code == 201
    assert store.profiles == {}


# ============================================================================
# Signin / signout / me
# ============================================================================


def test_signin_sets_session_cookie(client, company):
    _signup(client, companyName="Acme Streaming")

    response = client.post(
        "/api/auth/signin", json={"email": "FOUNDER@globex.test", "password": "s3cret-pass"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["companyName"] == "Acme Streaming"
    assert body["user"]["companyId"] == company["id"]
    token = body["session"]["access_token"]

    cookie = response.headers["set-cookie"]
    assert f"sb-access-token={token}" in cookie
    assert "HttpOnly" in cookie
    assert "samesite=lax" in cookie.lower()


def test_signin_bad_password(client):
    _signup(client)
    response = client.post(
        "/api/auth/signin", json={"email": "founder@globex.test", "password": "wrong-pass"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid email or password"
    assert "set-cookie" not in response.headers


def test_signin_requires_fields(client):
    response = client.post("/api/auth/signin", json={"email": "a@b.test"})
    assert response.status_code == 400
    assert response.json()["error"] == "Email and password are required"


def test_signout_revokes_and_clears_cookie(client, auth_provider, member):
    response = client.post("/api/auth/signout", headers=member.headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert auth_provider.signed_out == [member.token]
    assert 'sb-access-token=""' in response.headers["set-cookie"]

    assert client.get("/api/auth/me", headers=member.headers).status_code == 401


def test_signout_with_body_token(client, auth_provider, member):
    client.post("/api/auth/signout", json={"sessionToken": member.token})
    assert auth_provider.signed_out == [member.token]


def test_signout_without_session_is_ok(client, auth_provider):
    response = client.post("/api/auth/signout")
    assert response.status_code == 200
    assert auth_provider.signed_out == []


def test_me(client, store, auth_provider, company):
    caller = add_user(
        store,
        auth_provider,
        email="ops@acme.test",
        name="Ops",
        company_id=company["id"],
        company_role="admin",
    )

    response = client.get("/api/auth/me", headers=caller.headers)

    assert response.status_code == 200
    assert response.json()["user"] == {
        "id": caller.profile["user_id"],
        "email": "ops@acme.test",
        "name": "Ops",
        "role": "client",
        "companyId": company["id"],
        "companyName": "Acme Streaming",
        "companyRole": "admin",
    }
