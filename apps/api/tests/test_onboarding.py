"""Onboarding state: derived completion and completedTechStacks accumulation."""

import pytest

from unshared_api.services.onboarding import (
    accumulate_completed,
    compute_completion,
    default_state,
    merge_with_default,
)

NODE_DONE = {step: True for step in ("credentials", "install", "initialize", "integrate", "handle")}


def _state(**overrides):
    return {**default_state(), **overrides}


# ============================================================================
# Pure derivation
# ============================================================================


def test_unselected_stacks_never_block_completion():
    state = _state(selectedTechStacks=["nodejs"], nodejsSteps=NODE_DONE)
    assert compute_completion(state) is True


def test_selected_stack_with_missing_step_is_incomplete():
    steps = {**NODE_DONE, "handle": False}
    assert compute_completion(_state(selectedTechStacks=["nodejs"], nodejsSteps=steps)) is False


def test_both_stacks_must_be_complete():
    state = _state(
        selectedTechStacks=["nodejs", "nextjs"],
        nodejsSteps=NODE_DONE,
        nextjsSteps={"install": True, "integrate": False},
    )
    assert compute_completion(state) is False

    state["nextjsSteps"]["integrate"] = True
    assert compute_completion(state) is True


def test_accumulate_completed_keeps_order_and_never_drops():
    assert accumulate_completed(["nodejs"], [], ["nextjs"]) == ["nodejs", "nextjs"]
    assert accumulate_completed(["nodejs"], ["nodejs"], []) == ["nodejs"]


def test_merge_with_default_fills_missing_keys():
    merged = merge_with_default({"lastScreen": "nodejs"})
    assert merged["lastScreen"] == "nodejs"
    assert merged["selectedTechStacks"] == []
    assert set(merged["nextjsSteps"]) == {"install", "integrate"}


# ============================================================================
# HTTP
# ============================================================================


def _url(company):
    return f"/api/companies/{company['id']}/onboarding"


def test_get_returns_default_when_nothing_stored(client, company, member):
    response = client.get(_url(company), headers=member.headers)

    assert response.status_code == 200
    body = response.json()
    assert body["state"] == default_state()
    assert body["completed"] is False
    assert body["completed_at"] is None


def test_put_derives_completion(client, store, company, member):
    response = client.put(
        _url(company),
        json={"state": {"selectedTechStacks": ["nodejs"], "nodejsSteps": NODE_DONE}},
        headers=member.headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["completed"] is True
    assert body["completed_at"] is not None
    assert body["state"]["completedTechStacks"] == ["nodejs"]
    assert store.onboarding[company["id"]]["completed"] is True


def test_completed_stacks_only_grow(client, company, member):
    client.put(
        _url(company),
        json={"state": {"selectedTechStacks": ["nodejs"], "nodejsSteps": NODE_DONE}},
        headers=member.headers,
    )

    response = client.put(
        _url(company),
        json={
            "state": {
                "selectedTechStacks": ["nextjs"],
                "nextjsSteps": {"install": True, "integrate": False},
                "completedTechStacks": [],
            }
        },
        headers=member.headers,
    )

    body = response.json()
    assert body["completed"] is False
    assert body["completed_at"] is None
    assert body["state"]["completedTechStacks"] == ["nodejs"]


def test_completed_override(client, company, member):
    response = client.put(
        _url(company),
        json={"state": {"selectedTechStacks": ["nextjs"]}, "completed": True},
        headers=member.headers,
    )
    body = response.json()
    assert body["completed"] is True
    assert body["state"]["completedTechStacks"] == ["nextjs"]


def test_completed_at_is_kept_across_updates(client, company, member):
    payload = {"state": {"selectedTechStacks": ["nodejs"], "nodejsSteps": NODE_DONE}}
    first = client.put(_url(company), json=payload, headers=member.headers).json()
    second = client.put(_url(company), json=payload, headers=member.headers).json()
    assert second["completed_at"] == first["completed_at"]


@pytest.mark.parametrize("payload", [{}, {"state": "nodejs"}, {"state": ["nodejs"]}])
def test_put_requires_state_object(client, company, member, payload):
    response = client.put(_url(company), json=payload, headers=member.headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid payload. Expected { state }"


def test_put_requires_membership_even_for_super_admin(client, company, outsider, super_admin):
    payload = {"state": default_state()}
    assert client.put(_url(company), json=payload, headers=outsider.headers).status_code == 403
    assert client.put(_url(company), json=payload, headers=super_admin.headers).status_code == 403
    assert client.get(_url(company), headers=super_admin.headers).status_code == 200


def test_reset_onboarding(client, store, company, admin, member, super_admin):
    client.put(_url(company), json={"state": default_state()}, headers=member.headers)

    assert client.delete(_url(company), headers=member.headers).status_code == 403
    assert company["id"] in store.onboarding

    response = client.delete(_url(company), headers=admin.headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Onboarding reset successfully"
    assert company["id"] not in store.onboarding

    assert client.delete(_url(company), headers=super_admin.headers).status_code == 200
