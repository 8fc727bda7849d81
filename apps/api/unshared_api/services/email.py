"""Invitation email dispatch.

send_invite never raises for delivery problems: it returns a SendResult and
leaves compensation (deleting the invitation) to the caller. One attempt,
no retry.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from unshared_api.config.env import get_email_sender, get_site_url
from unshared_api.errors import AppError
from unshared_api.integrations.brevo import BrevoClient, get_brevo_client
from unshared_api.templates.invite import render_invite_email
from unshared_api.utils.sanitize import mask_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendResult:
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None


def build_invite_urls(token: str, site_url: Optional[str] = None) -> tuple[str, str]:
    """Return (accept_url, signup_url) for an invitation token."""
    base = (site_url or get_site_url()).rstrip("/")
    encoded = quote(token, safe="")
    return (
        f"{base}/invite/accept?token={encoded}",
        f"{base}/signup?invite={encoded}",
    )


def role_label(company_role: str) -> str:
    return "Admin" if company_role == "admin" else "Member"


class InviteMailer:
    """Renders and sends invitation emails through Brevo."""

    def __init__(self, brevo: BrevoClient, site_url: Optional[str] = None):
        self.brevo = brevo
        self.site_url = site_url

    async def send_invite(
        self,
        *,
        to: str,
        inviter_name: str,
        company_name: str,
        token: str,
        company_role: str,
    ) -> SendResult:
        if not self.brevo.configured:
            logger.error("email.invite.not_configured")
            return SendResult(success=False, error="Email service not configured")

        accept_url, signup_url = build_invite_urls(token, self.site_url)
        email = render_invite_email(
            inviter_name=inviter_name,
            company_name=company_name,
            role_label=role_label(company_role),
            accept_url=accept_url,
            signup_url=signup_url,
        )
        from_address, from_name = get_email_sender()

        try:
            response = await self.brevo.send_email(
                sender={"name": from_name, "email": from_address},
                to=[{"email": to}],
                subject=email.subject,
                html_content=email.html,
                text_content=email.text,
            )
        except AppError as e:
            logger.error(
                "email.invite.failed",
                extra={"to": mask_email(to), "status_code": e.status_code, "error": e.message},
            )
            return SendResult(success=False, error=e.message)

        message_id = response.get("messageId")
        logger.info(
            "email.invite.sent",
            extra={"to": mask_email(to), "message_id": message_id},
        )
        return SendResult(success=True, message_id=message_id)


def get_invite_mailer() -> InviteMailer:
    """FastAPI dependency: mailer over the environment-configured Brevo client."""
    return InviteMailer(get_brevo_client())
