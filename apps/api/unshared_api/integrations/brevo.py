"""Brevo (transactional email + sender domain) API client.

API Reference:
- POST /smtp/email                          send a transactional email
- POST /senders/domains                     register a sender domain
- GET  /senders/domains/{domain}            domain DNS status
- PUT  /senders/domains/{domain}/authenticate   trigger DNS verification

Environment Variables:
- BREVO_API_KEY: API key (sent as the "api-key" header)
- BREVO_API_BASE_URL: defaults to https://api.brevo.com/v3

Failures are raised as UpstreamError carrying Brevo's HTTP status, so the
status can pass through to API clients.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from unshared_api.config.env import get_brevo_api_base_url, get_brevo_api_key
from unshared_api.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_STATUS_MESSAGES = {
    400: "Bad request. DNS records may not be configured correctly.",
    401: "Invalid Brevo API key",
    404: "Domain does not exist in Brevo",
}


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        data = {}
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return _STATUS_MESSAGES.get(response.status_code, default)


class BrevoClient:
    """Brevo REST API client.

    A transport may be injected (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else get_brevo_api_key()
        self.base_url = (base_url or get_brevo_api_base_url()).rstrip("/")
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ConfigurationError("Email service not configured")
        return {
            "accept": "application/json",
            "content-type": "application/json",
            "api-key": self.api_key,
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        failure_message: str,
    ) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        headers = self._headers()

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.request(
                    method, url, headers=headers, json=json, timeout=DEFAULT_TIMEOUT
                )
        except httpx.HTTPError as e:
            logger.error(
                "brevo.request.failed",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise UpstreamError(failure_message) from e

        if response.status_code >= 400:
            message = _error_message(response, failure_message)
            logger.warning(
                "brevo.request.rejected",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "error": message,
                },
            )
            raise UpstreamError(message, status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    async def send_email(
        self,
        *,
        sender: dict[str, str],
        to: list[dict[str, str]],
        subject: str,
        html_content: str,
        text_content: str,
    ) -> dict[str, Any]:
        """Send a transactional email.

        Returns:
            Brevo response body ({"messageId": ...})
        """
        payload = {
            "sender": sender,
            "to": to,
            "subject": subject,
            "htmlContent": html_content,
            "textContent": text_content,
        }
        return await self._request(
            "POST", "/smtp/email", json=payload, failure_message="Failed to send email"
        )

    async def create_domain(self, domain: str) -> dict[str, Any]:
        """Register a sender domain. Response holds id and dns_records."""
        return await self._request(
            "POST",
            "/senders/domains",
            json={"name": domain},
            failure_message="Failed to create domain in Brevo",
        )

    async def get_domain(self, domain: str) -> dict[str, Any]:
        """Fetch domain configuration and per-record verification status."""
        return await self._request(
            "GET",
            f"/senders/domains/{quote(domain, safe='')}",
            failure_message="Failed to get domain configuration",
        )

    async def authenticate_domain(self, domain: str) -> dict[str, Any]:
        """Ask Brevo to re-check the domain's DNS records."""
        return await self._request(
            "PUT",
            f"/senders/domains/{quote(domain, safe='')}/authenticate",
            failure_message="Failed to authenticate domain",
        )


def get_brevo_client() -> BrevoClient:
    """FastAPI dependency: Brevo client from environment."""
    return BrevoClient()
