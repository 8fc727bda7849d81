"""Managed store access over Supabase PostgREST.

One method per query the API needs, so services never build PostgREST
queries themselves and tests can swap in an in-memory store.

Tables (see alembic/versions for DDL):
- companies
- profiles
- company_invitations
- company_api_keys
- company_data / company_data_history
- company_onboarding
- company_verification_settings

RPC functions:
- demote_company_admin(p_profile_id, p_company_id) -> boolean
- delete_company_cascade(p_company_id) -> integer
"""

import logging
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from unshared_api.errors import ConfigurationError, DuplicateApiKey, StoreError
from unshared_api.supabase_client import get_supabase_admin_client
from unshared_api.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
# code reported when PostgREST could not be reached
TRANSPORT_ERROR = "transport"

MEMBER_COLUMNS = "id, user_id, email, name, role, company_id, company_role, created_at"
INVITATION_COLUMNS = (
    "id, company_id, email, role, company_role, invited_by, created_at, expires_at, accepted_at"
)


def _log_transport_error(operation: str, error: httpx.HTTPError) -> None:
    logger.error(
        "store.transport.failed",
        extra={"operation": operation, "error_type": type(error).__name__, "error": str(error)},
    )


def _first(rows: Optional[list]) -> Optional[dict[str, Any]]:
    return rows[0] if rows else None


class SupabaseStore:
    """Typed query surface over the Supabase service client."""

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            try:
                self._client = get_supabase_admin_client()
            except RuntimeError as e:
                logger.error("store.config.missing", extra={"error": str(e)})
                raise ConfigurationError() from e
        return self._client

    def _run(self, query: Any, operation: str) -> Any:
        """Execute a PostgREST query, mapping API and transport errors to StoreError."""
        try:
            return query.execute()
        except APIError as e:
            logger.error(
                "store.query.failed",
                extra={
                    "operation": operation,
                    "code": e.code,
                    "error": e.message,
                },
            )
            raise StoreError(details={"operation": operation, "code": e.code}) from e
        except httpx.HTTPError as e:
            _log_transport_error(operation, e)
            raise StoreError(details={"operation": operation, "code": TRANSPORT_ERROR}) from e

    # ========================================================================
    # Profiles
    # ========================================================================

    def get_profile_by_user_id(self, user_id: str) -> Optional[dict[str, Any]]:
        query = self.client.table("profiles").select("*").eq("user_id", user_id).limit(1)
        return _first(self._run(query, "profiles.by_user_id").data)

    def get_profile(self, profile_id: str) -> Optional[dict[str, Any]]:
        query = self.client.table("profiles").select("*").eq("id", profile_id).limit(1)
        return _first(self._run(query, "profiles.by_id").data)

    def find_profile_by_email(self, email: str) -> Optional[dict[str, Any]]:
        query = self.client.table("profiles").select("*").eq("email", email.lower()).limit(1)
        return _first(self._run(query, "profiles.by_email").data)

    def insert_profile(self, row: dict[str, Any]) -> dict[str, Any]:
        query = self.client.table("profiles").insert(row)
        return self._run(query, "profiles.insert").data[0]

    def update_profile(self, profile_id: str, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
        query = self.client.table("profiles").update(fields).eq("id", profile_id)
        return _first(self._run(query, "profiles.update").data)

    def list_company_members(self, company_id: str) -> list[dict[str, Any]]:
        query = (
            self.client.table("profiles")
            .select(MEMBER_COLUMNS)
            .eq("company_id", company_id)
            .order("created_at")
        )
        return self._run(query, "profiles.by_company").data or []

    def demote_company_admin(self, profile_id: str, company_id: str) -> bool:
        """Demote an admin to member unless they are the company's last admin.

        The check and the write happen in one statement inside the
        database function, so concurrent demotions cannot both pass.

        Returns:
            True if demoted, False if the profile is the last admin
        """
        query = self.client.rpc(
            "demote_company_admin",
            {"p_profile_id": profile_id, "p_company_id": company_id},
        )
        return bool(self._run(query, "rpc.demote_company_admin").data)

    # ========================================================================
    # Companies
    # ========================================================================

    def get_company(self, company_id: str) -> Optional[dict[str, Any]]:
        query = self.client.table("companies").select("*").eq("id", company_id).limit(1)
        return _first(self._run(query, "companies.by_id").data)

    def find_company_by_name(self, name: str) -> Optional[dict[str, Any]]:
        query = self.client.table("companies").select("*").eq("name", name).limit(1)
        return _first(self._run(query, "companies.by_name").data)

    def list_companies(self) -> list[dict[str, Any]]:
        query = self.client.table("companies").select("*").order("created_at", desc=True)
        return self._run(query, "companies.list").data or []

    def insert_company(self, row: dict[str, Any]) -> dict[str, Any]:
        query = self.client.table("companies").insert(row)
        return self._run(query, "companies.insert").data[0]

    def update_company(self, company_id: str, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
        query = self.client.table("companies").update(fields).eq("id", company_id)
        return _first(self._run(query, "companies.update").data)

    def delete_company(self, company_id: str) -> int:
        """Detach every member and delete the company in one transaction.

        Returns:
            Number of member profiles detached
        """
        query = self.client.rpc("delete_company_cascade", {"p_company_id": company_id})
        return int(self._run(query, "rpc.delete_company_cascade").data or 0)

    # ========================================================================
    # Invitations
    # ========================================================================

    def insert_invitation(self, row: dict[str, Any]) -> dict[str, Any]:
        query = self.client.table("company_invitations").insert(row)
        return self._run(query, "invitations.insert").data[0]

    def get_invitation(self, invitation_id: str) -> Optional[dict[str, Any]]:
        query = (
            self.client.table("company_invitations").select("*").eq("id", invitation_id).limit(1)
        )
        return _first(self._run(query, "invitations.by_id").data)

    def get_invitation_by_token(self, token: str) -> Optional[dict[str, Any]]:
        query = self.client.table("company_invitations").select("*").eq("token", token).limit(1)
        return _first(self._run(query, "invitations.by_token").data)

    def delete_invitation(self, invitation_id: str) -> None:
        query = self.client.table("company_invitations").delete().eq("id", invitation_id)
        self._run(query, "invitations.delete")

    def mark_invitation_accepted(self, invitation_id: str, accepted_at: str) -> None:
        query = (
            self.client.table("company_invitations")
            .update({"accepted_at": accepted_at})
            .eq("id", invitation_id)
        )
        self._run(query, "invitations.accept")

    def list_open_invitations(self, company_id: str) -> list[dict[str, Any]]:
        """Unaccepted, unexpired invitations of a company, newest first."""
        query = (
            self.client.table("company_invitations")
            .select(INVITATION_COLUMNS)
            .eq("company_id", company_id)
            .is_("accepted_at", "null")
            .gt("expires_at", utc_now_iso())
            .order("created_at", desc=True)
        )
        return self._run(query, "invitations.open_by_company").data or []

    def list_pending_invitations_for_email(self, email: str) -> list[dict[str, Any]]:
        """Unaccepted, unexpired invitations addressed to email, with company name."""
        query = (
            self.client.table("company_invitations")
            .select(f"{INVITATION_COLUMNS}, companies(name)")
            .eq("email", email)
            .is_("accepted_at", "null")
            .gt("expires_at", utc_now_iso())
            .order("created_at", desc=True)
        )
        rows = self._run(query, "invitations.pending_by_email").data or []
        for row in rows:
            company = row.pop("companies", None) or {}
            row["company_name"] = company.get("name")
        return rows

    # ========================================================================
    # API keys
    # ========================================================================

    def get_api_key(self, company_id: str) -> Optional[dict[str, Any]]:
        query = (
            self.client.table("company_api_keys").select("*").eq("company_id", company_id).limit(1)
        )
        return _first(self._run(query, "api_keys.by_company").data)

    def insert_api_key(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert the company's API key.

        Raises:
            DuplicateApiKey: company_api_keys.company_id is unique
        """
        try:
            response = self.client.table("company_api_keys").insert(row).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateApiKey() from e
            logger.error(
                "store.query.failed",
                extra={"operation": "api_keys.insert", "code": e.code, "error": e.message},
            )
            raise StoreError(details={"operation": "api_keys.insert", "code": e.code}) from e
        except httpx.HTTPError as e:
            _log_transport_error("api_keys.insert", e)
            raise StoreError(details={"operation": "api_keys.insert", "code": TRANSPORT_ERROR}) from e
        return response.data[0]

    # ========================================================================
    # Company data
    # ========================================================================

    def get_company_data(self, company_id: str) -> Optional[dict[str, Any]]:
        query = self.client.table("company_data").select("*").eq("company_id", company_id).limit(1)
        return _first(self._run(query, "company_data.by_company").data)

    def upsert_company_data(self, company_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Write company data; the table trigger bumps version and records history."""
        query = self.client.table("company_data").upsert(
            {"company_id": company_id, "data": data, "updated_at": utc_now_iso()},
            on_conflict="company_id",
        )
        return self._run(query, "company_data.upsert").data[0]

    def list_company_data_history(
        self, company_id: str, limit: int, offset: int
    ) -> tuple[list[dict[str, Any]], int]:
        query = (
            self.client.table("company_data_history")
            .select("id, version, data, created_at", count="exact")
            .eq("company_id", company_id)
            .order("version", desc=True)
            .range(offset, offset + limit - 1)
        )
        response = self._run(query, "company_data_history.page")
        return response.data or [], response.count or 0

    def get_company_data_version(self, company_id: str, version: int) -> Optional[dict[str, Any]]:
        query = (
            self.client.table("company_data_history")
            .select("version, data, created_at")
            .eq("company_id", company_id)
            .eq("version", version)
            .limit(1)
        )
        return _first(self._run(query, "company_data_history.by_version").data)

    # ========================================================================
    # Onboarding
    # ========================================================================

    def get_onboarding(self, company_id: str) -> Optional[dict[str, Any]]:
        query = (
            self.client.table("company_onboarding").select("*").eq("company_id", company_id).limit(1)
        )
        return _first(self._run(query, "onboarding.by_company").data)

    def upsert_onboarding(self, row: dict[str, Any]) -> dict[str, Any]:
        query = self.client.table("company_onboarding").upsert(row, on_conflict="company_id")
        return self._run(query, "onboarding.upsert").data[0]

    def delete_onboarding(self, company_id: str) -> None:
        query = self.client.table("company_onboarding").delete().eq("company_id", company_id)
        self._run(query, "onboarding.delete")

    # ========================================================================
    # Verification settings
    # ========================================================================

    def get_verification_settings(self, company_id: str) -> Optional[dict[str, Any]]:
        query = (
            self.client.table("company_verification_settings")
            .select("*")
            .eq("company_id", company_id)
            .limit(1)
        )
        return _first(self._run(query, "verification.by_company").data)

    def upsert_verification_settings(self, row: dict[str, Any]) -> dict[str, Any]:
        query = self.client.table("company_verification_settings").upsert(
            row, on_conflict="company_id"
        )
        return self._run(query, "verification.upsert").data[0]

    # ========================================================================
    # Health
    # ========================================================================

    def ping(self) -> None:
        """Cheapest round trip that exercises the service key."""
        self._run(self.client.table("companies").select("id").limit(1), "health.ping")


def get_store() -> SupabaseStore:
    """FastAPI dependency: store bound to the service client.

    The client is created on first query, so a missing Supabase setting
    surfaces as ConfigurationError only once the store is actually used.
    """
    return SupabaseStore()
