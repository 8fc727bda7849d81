"""Tests for opaque credential generation.

Test Coverage:
T1: Invitation tokens are 64 hex chars and unique
T2: API keys carry the usk_ prefix
T3: Constant-time comparison
"""

import re

import pytest

from unshared_api.auth.token_lifecycle import (
    constant_time_equals,
    generate_api_key,
    generate_invite_token,
)


# ============================================================================
# T1: Invitation tokens
# ============================================================================


def test_invite_token_format():
    token = generate_invite_token()
    assert re.fullmatch(r"[0-9a-f]{64}", token)


def test_invite_tokens_are_unique():
    tokens = {generate_invite_token() for _ in range(200)}
    assert len(tokens) == 200


# ============================================================================
# T2: API keys
# ============================================================================


def test_api_key_format():
    key = generate_api_key()
    assert key.startswith("usk_")
    assert len(key) == 68
    assert re.fullmatch(r"usk_[0-9a-f]{64}", key)


def test_api_key_custom_prefix():
    assert generate_api_key("test").startswith("test_")


# ============================================================================
# T3: Comparison
# ============================================================================


@pytest.mark.parametrize(
    "presented,expected,result",
    [
        ("secret", "secret", True),
        ("secret", "Secret", False),
        ("", "secret", False),
        ("sécret", "sécret", True),
    ],
)
def test_constant_time_equals(presented, expected, result):
    assert constant_time_equals(presented, expected) is result
