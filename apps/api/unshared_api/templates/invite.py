"""Invitation email template (HTML + plain text)."""

from dataclasses import dataclass
from html import escape

INVITATION_TTL_DAYS = 7


@dataclass(frozen=True)
class InviteEmail:
    subject: str
    html: str
    text: str


def render_invite_email(
    *,
    inviter_name: str,
    company_name: str,
    role_label: str,
    accept_url: str,
    signup_url: str,
) -> InviteEmail:
    """Render the invitation email.

    Names are HTML-escaped in the HTML part; URLs are quoted attribute values.
    """
    subject = f"{inviter_name} invited you to join {company_name}"

    inviter = escape(inviter_name)
    company = escape(company_name)
    role = escape(role_label)
    signup_href = escape(signup_url, quote=True)
    accept_href = escape(accept_url, quote=True)

    html = f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Company Invitation</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
  <div style="background-color: #f8f9fa; padding: 30px; border-radius: 8px;">
    <h1 style="color: #2c3e50; margin-top: 0;">You've been invited!</h1>
    <p style="font-size: 16px;">
      <strong>{inviter}</strong> has invited you to join <strong>{company}</strong> as a <strong>{role}</strong>.
    </p>
    <p style="font-size: 16px; margin: 30px 0;">
      New to Unshared Labs? Create your account to get started.
    </p>
    <div style="margin: 30px 0; text-align: center;">
      <a href="{signup_href}" style="display: inline-block; background-color: #10b981; color: #ffffff; padding: 14px 28px; text-decoration: none; border-radius: 6px; font-weight: 600; font-size: 16px;">
        Accept Invitation &amp; Get Started
      </a>
    </div>
    <p style="font-size: 14px;">
      Already have an account? <a href="{accept_href}" style="color: #10b981;">Sign in and accept the invitation</a>.
    </p>
    <p style="font-size: 12px; color: #999; margin-top: 30px; border-top: 1px solid #eee; padding-top: 20px;">
      If the button doesn't work, copy and paste this link into your browser:<br>
      <a href="{signup_href}" style="color: #10b981; word-break: break-all;">{signup_href}</a>
    </p>
    <p style="font-size: 12px; color: #999; margin-top: 20px;">
      This invitation will expire in {INVITATION_TTL_DAYS} days.
    </p>
  </div>
</body>
</html>
"""

    text = (
        "You've been invited!\n"
        "\n"
        f"{inviter_name} has invited you to join {company_name} as a {role_label}.\n"
        "\n"
        "Create your account to get started:\n"
        f"{signup_url}\n"
        "\n"
        "Already have an account? Sign in and accept the invitation:\n"
        f"{accept_url}\n"
        "\n"
        f"This invitation will expire in {INVITATION_TTL_DAYS} days."
    )

    return InviteEmail(subject=subject, html=html, text=text)
