"""Application error taxonomy.

Every error raised by services and auth dependencies derives from AppError
and carries the HTTP status and the user-facing message. main.py translates
AppError into the JSON envelope:

    {"success": false, "error": "<message>"}            (production)
    {"success": false, "error": "<message>", "details"}  (other envs)
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)


# ============================================================================
# 401 / 403
# ============================================================================


class NotAuthenticated(AppError):
    status_code = 401
    default_message = "Not authenticated"


class InvalidSession(AppError):
    status_code = 401
    default_message = "Invalid session"


class InvalidApiKey(AppError):
    status_code = 401
    default_message = "Unauthorized - Invalid API key"


class Unauthorized(AppError):
    """Authenticated but lacking the role or membership for the operation."""

    status_code = 403
    default_message = "Unauthorized"


class EmailMismatch(Unauthorized):
    default_message = "This invitation was sent to a different email address"


# ============================================================================
# 400 / 404
# ============================================================================


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class Conflict(AppError):
    """State conflict. Reported as 400 to match the public API contract."""

    status_code = 400
    default_message = "Conflict"


class DuplicateApiKey(Conflict):
    default_message = "API key already exists. Only one API key can be generated per company."


class AlreadyAccepted(Conflict):
    default_message = "This invitation has already been accepted"


class InvitationExpired(Conflict):
    default_message = "This invitation has expired"


class LastAdminError(Conflict):
    default_message = "Cannot remove the last admin. Promote another member to admin first."


# ============================================================================
# 5xx
# ============================================================================


class ConfigurationError(AppError):
    status_code = 500
    default_message = "Configuration error"


class UpstreamError(AppError):
    """Third-party provider failure; status passes through when known."""

    status_code = 500
    default_message = "Upstream service error"


class VerificationFailed(AppError):
    status_code = 500
    default_message = "Profile update verification failed"


class UnexpectedError(AppError):
    status_code = 500
    default_message = "An unexpected error occurred"


class StoreError(UnexpectedError):
    """Managed store rejected a query or mutation."""

    default_message = "Database operation failed"
