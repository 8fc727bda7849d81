"""Company API key issuance (one key per company)."""

import logging
from typing import Any, Optional

from unshared_api.auth.session_auth import AuthContext, has_company_access, require_company_admin
from unshared_api.auth.token_lifecycle import generate_api_key
from unshared_api.errors import DuplicateApiKey, Unauthorized
from unshared_api.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


def get_api_key(ctx: AuthContext, company_id: str) -> Optional[dict[str, Any]]:
    """Members of the company may read its key."""
    if not has_company_access(ctx.profile, company_id):
        raise Unauthorized("Unauthorized - You do not have access to this company")

    row = ctx.store.get_api_key(company_id)
    if not row:
        return None
    return {"apiKey": row["api_key"], "createdAt": row.get("created_at")}


def create_api_key(ctx: AuthContext, company_id: str) -> dict[str, Any]:
    """Issue the company's API key.

    The store's unique constraint on company_id rejects a second key, so
    two concurrent requests cannot both succeed.
    """
    require_company_admin(ctx, company_id, "Only company admins can generate API keys")

    store = ctx.store
    if store.get_api_key(company_id):
        raise DuplicateApiKey()

    row = store.insert_api_key(
        {"company_id": company_id, "api_key": generate_api_key(), "created_at": utc_now_iso()}
    )

    logger.info("api_key.created", extra={"company_id": company_id, "user_id": ctx.user_id})
    return {"apiKey": row["api_key"], "createdAt": row.get("created_at")}
