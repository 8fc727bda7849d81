"""Request context management for observability.

Context variables for request tracking across async boundaries.
"""

from contextvars import ContextVar

# Request ID - unique per HTTP request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Authenticated user (auth provider user id)
user_id_var: ContextVar[str] = ContextVar("user_id", default="")

# Company the authenticated user belongs to
company_id_var: ContextVar[str] = ContextVar("company_id", default="")
