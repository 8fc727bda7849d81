"""Opaque credential generation.

- Invitation tokens: 32 random bytes, hex encoded (64 chars), single use
- Company API keys: "usk_" + 32 random bytes hex encoded

SECURITY:
- Uses secrets.token_bytes() (CSPRNG), 256 bits of entropy
- Comparisons against presented secrets use hmac.compare_digest
"""

import hmac
import secrets

API_KEY_PREFIX = "usk"
TOKEN_BYTES = 32


def generate_invite_token() -> str:
    """Generate an invitation token (64 hex chars)."""
    return secrets.token_bytes(TOKEN_BYTES).hex()


def generate_api_key(prefix: str = API_KEY_PREFIX) -> str:
    """Generate a company API key.

    Token format: {prefix}_{hex(32_random_bytes)}
    Example: usk_3f9c...e1 (68 chars)
    """
    return f"{prefix}_{secrets.token_bytes(TOKEN_BYTES).hex()}"


def constant_time_equals(presented: str, expected: str) -> bool:
    """Constant-time string comparison for secrets."""
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))
