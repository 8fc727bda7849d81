"""Super-admin fleet view (read-only)."""

from typing import Any

from unshared_api.db.store import SupabaseStore
from unshared_api.errors import NotFound


def list_companies(store: SupabaseStore) -> list[dict[str, Any]]:
    return store.list_companies()


def get_company(store: SupabaseStore, company_id: str) -> dict[str, Any]:
    company = store.get_company(company_id)
    if not company:
        raise NotFound("Company not found")
    return company


def list_company_clients(store: SupabaseStore, company_id: str) -> list[dict[str, Any]]:
    get_company(store, company_id)
    return store.list_company_members(company_id)
