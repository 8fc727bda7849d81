"""Sender verification service client.

The external email service registers a sender identity and emails it a
one-time code; the code is then validated to mark the sender verified.

- POST {EMAIL_SERVICE_URL}/senders   {email, name}
      -> {success, data: {id, spfError, dkimError}}
- PUT  {EMAIL_SERVICE_URL}/validate  {otp, sender_id}
      -> {success, data: {message}}

The service reports failures through the "success" flag as well as the HTTP
status; both are checked.
"""

import logging
from typing import Any, Optional

import httpx

from unshared_api.config.env import get_email_service_url
from unshared_api.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)


def _body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class SenderVerificationClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or get_email_service_url()).rstrip("/")
        self.transport = transport

    async def _send(self, method: str, path: str, payload: dict[str, Any], failure: str):
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                return await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers={"Content-Type": "application/json"},
                    json=payload,
                    timeout=30.0,
                )
        except httpx.HTTPError as e:
            logger.error("sender_service.request.failed", extra={"path": path, "error": str(e)})
            raise UpstreamError(failure) from e

    async def create_sender(self, email: str, name: str) -> dict[str, Any]:
        """Register a sender; the service emails an OTP to the address.

        Returns:
            {"id": int, "spfError": bool, "dkimError": bool}
        """
        response = await self._send(
            "POST", "/senders", {"email": email, "name": name}, "Failed to create sender"
        )
        body = _body(response)
        data = body.get("data") if isinstance(body.get("data"), dict) else {}

        if response.status_code >= 400 or not body.get("success") or not data.get("id"):
            message = body.get("error") or body.get("message") or "Failed to create sender"
            logger.warning(
                "sender_service.create.rejected",
                extra={"status_code": response.status_code, "error": message},
            )
            raise UpstreamError(message)

        return {
            "id": data["id"],
            "spfError": bool(data.get("spfError")),
            "dkimError": bool(data.get("dkimError")),
        }

    async def validate_otp(self, sender_id: str, otp: str) -> None:
        """Validate a one-time code.

        Raises:
            ValidationError: Code rejected (400)
        """
        response = await self._send(
            "PUT",
            "/validate",
            {"otp": otp, "sender_id": str(sender_id)},
            "Failed to validate OTP",
        )
        body = _body(response)
        if not body.get("success"):
            data = body.get("data") if isinstance(body.get("data"), dict) else {}
            message = body.get("error") or data.get("message") or "Invalid OTP"
            logger.info("sender_service.otp.rejected", extra={"sender_id": str(sender_id)})
            raise ValidationError(message)


def get_sender_client() -> SenderVerificationClient:
    return SenderVerificationClient()
