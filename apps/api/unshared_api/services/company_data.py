"""Versioned dashboard data per company.

Writes come from the detection pipeline (service-key authenticated); reads
come from dashboard users. Versioning and history rows are maintained by a
store-side trigger on company_data.
"""

import logging
from typing import Any, Optional

from unshared_api.auth.session_auth import AuthContext, is_super_admin, require_company_read
from unshared_api.db.store import SupabaseStore
from unshared_api.errors import NotFound, Unauthorized, ValidationError
from unshared_api.services.onboarding import is_onboarding_complete

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 100


def get_current_data(ctx: AuthContext, company_id: str) -> Optional[dict[str, Any]]:
    """Current data, or None when nothing was ingested yet.

    Non super admins only see data once onboarding is complete.
    """
    require_company_read(ctx, company_id)

    store = ctx.store
    if not is_super_admin(ctx.profile) and not is_onboarding_complete(store, company_id):
        raise Unauthorized(
            "Onboarding incomplete. Please complete onboarding to view dashboard data."
        )

    row = store.get_company_data(company_id)
    if not row:
        return None
    return {
        "data": row.get("data"),
        "version": row.get("version"),
        "updated_at": row.get("updated_at"),
    }


def ingest_data(store: SupabaseStore, company_id: str, data: Any) -> dict[str, Any]:
    """Replace the company's current data (caller already verified the service key)."""
    if not store.get_company(company_id):
        raise NotFound("Company not found")
    if not isinstance(data, dict):
        raise ValidationError("Invalid data format. Expected a JSON object")

    row = store.upsert_company_data(company_id, data)

    logger.info(
        "company_data.ingested",
        extra={"company_id": company_id, "version": row.get("version")},
    )
    return {"version": row.get("version"), "company_id": company_id}


def parse_paging(limit: Optional[str], offset: Optional[str]) -> tuple[int, int]:
    """Parse limit/offset query values; invalid input falls back to defaults."""
    try:
        page_limit = int(limit) if limit not in (None, "") else DEFAULT_HISTORY_LIMIT
    except ValueError:
        page_limit = DEFAULT_HISTORY_LIMIT
    try:
        page_offset = int(offset) if offset not in (None, "") else 0
    except ValueError:
        page_offset = 0

    page_limit = max(1, min(page_limit, MAX_HISTORY_LIMIT))
    return page_limit, max(0, page_offset)


def get_history(
    ctx: AuthContext, company_id: str, limit: int, offset: int
) -> dict[str, Any]:
    require_company_read(ctx, company_id)
    rows, total = ctx.store.list_company_data_history(company_id, limit, offset)
    return {"history": rows, "total": total, "limit": limit, "offset": offset}


def parse_version(raw: str) -> int:
    try:
        version = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Invalid version number")
    if version < 1:
        raise ValidationError("Invalid version number")
    return version


def get_version(ctx: AuthContext, company_id: str, raw_version: str) -> dict[str, Any]:
    version = parse_version(raw_version)
    require_company_read(ctx, company_id)

    row = ctx.store.get_company_data_version(company_id, version)
    if not row:
        raise NotFound("Version not found")
    return {
        "version": row.get("version"),
        "data": row.get("data"),
        "created_at": row.get("created_at"),
    }
