"""Onboarding state.

A company's onboarding state is a small JSON document:

    {
      "selectedTechStacks": ["nodejs", "nextjs"],
      "nodejsSteps": {"credentials": true, "install": true, ...},
      "nextjsSteps": {"install": true, "integrate": false},
      "lastScreen": "select" | "nodejs" | "nextjs" | "coming_soon",
      "completedTechStacks": ["nodejs"]
    }

A stack is complete when it is not selected, or when all of its fixed steps
are true. Onboarding is complete when every selected stack is complete.
completedTechStacks only ever grows.
"""

import logging
from typing import Any, Optional

from unshared_api.auth.session_auth import (
    AuthContext,
    has_company_access,
    is_company_admin,
    is_super_admin,
    require_company_read,
)
from unshared_api.db.store import SupabaseStore
from unshared_api.errors import Unauthorized, ValidationError
from unshared_api.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

STACK_STEPS: dict[str, tuple[str, ...]] = {
    "nodejs": ("credentials", "install", "initialize", "integrate", "handle"),
    "nextjs": ("install", "integrate"),
}

STEP_KEYS = {"nodejs": "nodejsSteps", "nextjs": "nextjsSteps"}


def default_state() -> dict[str, Any]:
    return {
        "selectedTechStacks": [],
        "nodejsSteps": {step: False for step in STACK_STEPS["nodejs"]},
        "nextjsSteps": {step: False for step in STACK_STEPS["nextjs"]},
        "lastScreen": "select",
        "completedTechStacks": [],
    }


def merge_with_default(state: Optional[dict[str, Any]]) -> dict[str, Any]:
    return {**default_state(), **(state or {})}


def is_stack_complete(state: dict[str, Any], stack: str) -> bool:
    """Unselected stacks never block completion."""
    if stack not in (state.get("selectedTechStacks") or []):
        return True
    steps = state.get(STEP_KEYS.get(stack, ""), None) or {}
    return all(bool(steps.get(step)) for step in STACK_STEPS.get(stack, ()))


def compute_completion(state: dict[str, Any]) -> bool:
    """True iff every selected stack has all of its steps checked."""
    return all(is_stack_complete(state, stack) for stack in STACK_STEPS)


def completed_stacks(state: dict[str, Any]) -> list[str]:
    """Selected stacks whose steps are all checked."""
    selected = state.get("selectedTechStacks") or []
    return [stack for stack in STACK_STEPS if stack in selected and is_stack_complete(state, stack)]


def accumulate_completed(
    previous: list[str], incoming: list[str], newly_completed: list[str]
) -> list[str]:
    """Ordered union; never drops an entry already recorded."""
    result: list[str] = []
    for stack in [*previous, *incoming, *newly_completed]:
        if stack not in result:
            result.append(stack)
    return result


def _record(row: Optional[dict[str, Any]]) -> dict[str, Any]:
    if not row:
        return {
            "state": default_state(),
            "completed": False,
            "completed_at": None,
            "updated_at": None,
        }
    return {
        "state": merge_with_default(row.get("state")),
        "completed": bool(row.get("completed")),
        "completed_at": row.get("completed_at"),
        "updated_at": row.get("updated_at"),
    }


def get_onboarding(ctx: AuthContext, company_id: str) -> dict[str, Any]:
    require_company_read(ctx, company_id)
    return _record(ctx.store.get_onboarding(company_id))


def is_onboarding_complete(store: SupabaseStore, company_id: str) -> bool:
    row = store.get_onboarding(company_id)
    return bool(row and row.get("completed"))


def update_onboarding(
    ctx: AuthContext,
    company_id: str,
    state: Any,
    completed: Optional[bool] = None,
) -> dict[str, Any]:
    """Persist a new onboarding state.

    Args:
        state: Incoming state document (must be a JSON object)
        completed: Explicit override of the derived completion flag
    """
    if not has_company_access(ctx.profile, company_id):
        raise Unauthorized()
    if not isinstance(state, dict):
        raise ValidationError("Invalid payload. Expected { state }")

    store = ctx.store
    existing = store.get_onboarding(company_id)
    previous_state = merge_with_default((existing or {}).get("state"))

    merged = merge_with_default(state)
    is_completed = compute_completion(merged) if completed is None else bool(completed)

    previous = previous_state.get("completedTechStacks") or []
    incoming = merged.get("completedTechStacks") or []
    newly_completed: list[str] = []
    if is_completed and not previous and not incoming:
        # first completion records every selected stack
        newly_completed = list(merged.get("selectedTechStacks") or [])
    elif is_completed:
        newly_completed = completed_stacks(merged)

    completed_list = accumulate_completed(previous, incoming, newly_completed)
    final_state = {**merged, "completedTechStacks": completed_list}

    completed_at = None
    if is_completed:
        completed_at = (existing or {}).get("completed_at") or utc_now_iso()

    row = store.upsert_onboarding(
        {
            "company_id": company_id,
            "state": final_state,
            "completed": is_completed,
            "completed_at": completed_at,
            "updated_at": utc_now_iso(),
        }
    )

    if is_completed and not (existing or {}).get("completed"):
        logger.info(
            "onboarding.completed",
            extra={"company_id": company_id, "stacks": completed_list},
        )
    return _record(row)


def reset_onboarding(ctx: AuthContext, company_id: str) -> None:
    """Remove the stored state; the next read returns the default."""
    company_admin = has_company_access(ctx.profile, company_id) and is_company_admin(ctx.profile)
    if not (company_admin or is_super_admin(ctx.profile)):
        raise Unauthorized()

    ctx.store.delete_onboarding(company_id)
    logger.info("onboarding.reset", extra={"company_id": company_id})
