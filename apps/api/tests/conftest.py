"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # => .../apps/api

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from store_fakes import (
    SERVICE_KEY,
    FakeAuthProvider,
    FakeLogoStorage,
    FakeMailer,
    FakeStore,
    add_user,
)
from unshared_api.auth.provider import get_auth_provider
from unshared_api.auth.service_key import get_expected_service_key
from unshared_api.db.store import get_store
from unshared_api.integrations.brevo import get_brevo_client
from unshared_api.integrations.sender_service import get_sender_client
from unshared_api.main import app
from unshared_api.services.email import get_invite_mailer
from unshared_api.storage.logo_storage import get_logo_storage


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def auth_provider() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def logo_storage() -> FakeLogoStorage:
    return FakeLogoStorage()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def brevo():
    """Brevo client mock; domain calls succeed with an empty body by default."""
    client = MagicMock()
    client.configured = True
    client.create_domain = AsyncMock(return_value={})
    client.get_domain = AsyncMock(return_value={})
    client.authenticate_domain = AsyncMock(return_value={})
    return client


@pytest.fixture
def sender_client():
    client = MagicMock()
    client.create_sender = AsyncMock(
        return_value={"id": 4242, "spfError": False, "dkimError": True}
    )
    client.validate_otp = AsyncMock(return_value=None)
    return client


@pytest.fixture
def client(store, auth_provider, logo_storage, mailer, brevo, sender_client):
    """TestClient with every external dependency replaced by an in-memory fake."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_auth_provider] = lambda: auth_provider
    app.dependency_overrides[get_logo_storage] = lambda: logo_storage
    app.dependency_overrides[get_invite_mailer] = lambda: mailer
    app.dependency_overrides[get_brevo_client] = lambda: brevo
    app.dependency_overrides[get_sender_client] = lambda: sender_client
    app.dependency_overrides[get_expected_service_key] = lambda: SERVICE_KEY

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def company(store):
    return store.insert_company({"name": "Acme Streaming"})


@pytest.fixture
def admin(store, auth_provider, company):
    return add_user(
        store,
        auth_provider,
        email="admin@acme.test",
        name="Ada Admin",
        company_id=company["id"],
        company_role="admin",
    )


@pytest.fixture
def member(store, auth_provider, company):
    return add_user(
        store,
        auth_provider,
        email="member@acme.test",
        name="Max Member",
        company_id=company["id"],
        company_role="member",
    )


@pytest.fixture
def outsider(store, auth_provider):
    """Client with no company."""
    return add_user(store, auth_provider, email="outsider@elsewhere.test")


@pytest.fixture
def super_admin(store, auth_provider):
    return add_user(store, auth_provider, email="root@unshared.test", role="super_admin")
