"""Sender domain authentication (Brevo).

A company registers its sending domain with Brevo, publishes the DNS
records returned here, then asks Brevo to authenticate the domain.

DNS bundle stored in company_verification_settings.domain_dns_records:
- dkim_txt, brevo_code: returned by Brevo (with a "status" flag)
- dkim1_cname, dkim2_cname: Brevo DKIM CNAMEs derived from the domain name
- dmarc_txt: permissive DMARC policy reporting to Brevo
"""

import logging
import re
from typing import Any, Optional

from unshared_api.auth.session_auth import AuthContext, require_company_admin
from unshared_api.errors import UpstreamError, ValidationError
from unshared_api.integrations.brevo import BrevoClient
from unshared_api.services.verification import ADMIN_REQUIRED, save_settings

logger = logging.getLogger(__name__)

DOMAIN_PATTERN = re.compile(r"^([a-z0-9]+(-[a-z0-9]+)*\.)+[a-z]{2,}$", re.IGNORECASE)

DMARC_VALUE = "v=DMARC1; p=none; rua=mailto:rua@dmarc.brevo.com"

DOMAIN_NOT_CONFIGURED = "Domain not configured. Please set up domain first."


def validate_domain(domain: Any) -> str:
    if not domain or not isinstance(domain, str) or not domain.strip():
        raise ValidationError("Domain is required")
    domain = domain.strip().lower()
    if not DOMAIN_PATTERN.match(domain):
        raise ValidationError("Invalid domain format")
    return domain


def _cname(index: int, dkim_domain: str) -> dict[str, str]:
    host = f"brevo{index}._domainkey"
    return {
        "type": "CNAME",
        "name": host,
        "value": f"b{index}.{dkim_domain}.dkim.brevo.com",
        "host_name": host,
    }


def build_dns_records(domain: str, brevo_records: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Full DNS bundle for domain from Brevo's dkim_record / brevo_code."""
    brevo_records = brevo_records or {}
    dkim_domain = domain.replace(".", "-")
    return {
        "dkim_txt": brevo_records.get("dkim_record"),
        "brevo_code": brevo_records.get("brevo_code"),
        "dkim1_cname": _cname(1, dkim_domain),
        "dkim2_cname": _cname(2, dkim_domain),
        "dmarc_txt": {
            "type": "TXT",
            "name": "_dmarc",
            "value": DMARC_VALUE,
            "host_name": "_dmarc",
        },
    }


def _merge_status(stored: dict[str, Any], brevo_records: dict[str, Any]) -> dict[str, Any]:
    merged = dict(stored)
    for stored_key, brevo_key in (("dkim_txt", "dkim_record"), ("brevo_code", "brevo_code")):
        record = merged.get(stored_key)
        remote = brevo_records.get(brevo_key)
        if isinstance(record, dict) and isinstance(remote, dict) and "status" in remote:
            merged[stored_key] = {**record, "status": remote["status"]}
    return merged


def _configured_domain(ctx: AuthContext, company_id: str) -> tuple[str, dict[str, Any]]:
    settings = ctx.store.get_verification_settings(company_id)
    if not settings or not settings.get("domain"):
        raise ValidationError(DOMAIN_NOT_CONFIGURED)
    return settings["domain"], settings


async def register_domain(
    ctx: AuthContext, brevo: BrevoClient, company_id: str, domain: Any
) -> dict[str, Any]:
    domain = validate_domain(domain)
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)

    try:
        created = await brevo.create_domain(domain)
    except UpstreamError as e:
        raise UpstreamError(e.message) from e

    domain_id = str(created["id"]) if created.get("id") is not None else None
    records = build_dns_records(domain, created.get("dns_records"))

    save_settings(
        ctx.store,
        company_id,
        domain=domain,
        domain_brevo_id=domain_id,
        domain_dns_records=records,
    )

    logger.info("domain.registered", extra={"company_id": company_id, "domain": domain})
    return {
        "message": created.get("message")
        or "Domain added successfully. Please add the DNS records below to authenticate your domain.",
        "data": {"domain": domain, "domain_id": domain_id, "dns_records": records},
    }


async def domain_status(ctx: AuthContext, brevo: BrevoClient, company_id: str) -> dict[str, Any]:
    """Current Brevo verification state with the stored DNS bundle.

    Statuses reported by Brevo are merged into the stored records; when no
    bundle was stored the full bundle is rebuilt from Brevo's response.
    """
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)
    domain, settings = _configured_domain(ctx, company_id)

    try:
        remote = await brevo.get_domain(domain)
    except UpstreamError as e:
        raise UpstreamError(e.message) from e

    remote_records = remote.get("dns_records") or {}
    stored = settings.get("domain_dns_records")

    if stored and remote_records:
        records = _merge_status(stored, remote_records)
    elif remote_records:
        records = build_dns_records(domain, remote_records)
    else:
        records = stored or None

    return {
        "domain": remote.get("domain") or remote.get("domain_name") or domain,
        "verified": bool(remote.get("verified")),
        "authenticated": bool(remote.get("authenticated")),
        "dns_records": records,
    }


async def authenticate_domain(
    ctx: AuthContext, brevo: BrevoClient, company_id: str
) -> dict[str, Any]:
    """Trigger Brevo's DNS check. Brevo's HTTP status passes through on failure."""
    require_company_admin(ctx, company_id, ADMIN_REQUIRED)
    domain, _ = _configured_domain(ctx, company_id)

    result = await brevo.authenticate_domain(domain)

    logger.info("domain.authenticated", extra={"company_id": company_id, "domain": domain})
    return {
        "message": result.get("message") or "Domain authenticated successfully",
        "data": {"domain_name": result.get("domain_name") or domain},
    }
