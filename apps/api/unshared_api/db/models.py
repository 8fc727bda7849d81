"""SQLAlchemy ORM models for the Unshared Labs schema.

The API reads and writes through Supabase PostgREST (db.store); these models
describe the same tables for Alembic and schema tests.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    BIGINT,
    BOOLEAN,
    JSON,
    TEXT,
    TIMESTAMP,
    UUID,
    CheckConstraint,
    ForeignKey,
    Index,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Company(Base):
    """Tenant: one customer organisation."""

    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    name: Mapped[str] = mapped_column(TEXT, nullable=False)
    website_url: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    # storage object path of logo_url
    logo_path: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )


class Profile(Base):
    """User profile: global role plus optional company membership."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(TEXT, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    role: Mapped[str] = mapped_column(TEXT, nullable=False, default="client", server_default="client")
    company_id: Mapped[Optional[str]] = mapped_column(
        UUID(as_uuid=False), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True
    )
    company_role: Mapped[str] = mapped_column(
        TEXT, nullable=False, default="member", server_default="member"
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )

    __table_args__ = (
        CheckConstraint("role IN ('client', 'super_admin')", name="ck_profiles_role"),
        CheckConstraint("company_role IN ('admin', 'member')", name="ck_profiles_company_role"),
        Index("idx_profiles_company", "company_id"),
        Index("idx_profiles_email", "email"),
    )


class CompanyInvitation(Base):
    """Pending / accepted invitation into a company."""

    __tablename__ = "company_invitations"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    company_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    email: Mapped[str] = mapped_column(TEXT, nullable=False)
    role: Mapped[str] = mapped_column(TEXT, nullable=False, default="client", server_default="client")
    company_role: Mapped[str] = mapped_column(
        TEXT, nullable=False, default="member", server_default="member"
    )
    token: Mapped[str] = mapped_column(TEXT, nullable=False, unique=True)
    invited_by: Mapped[Optional[str]] = mapped_column(UUID(as_uuid=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    accepted_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "company_role IN ('admin', 'member')", name="ck_company_invitations_company_role"
        ),
        Index("idx_company_invitations_company", "company_id"),
        Index("idx_company_invitations_email", "email"),
    )


class CompanyApiKey(Base):
    """The company's API key (at most one per company)."""

    __tablename__ = "company_api_keys"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    company_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    api_key: Mapped[str] = mapped_column(TEXT, nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )

    __table_args__ = (UniqueConstraint("company_id", name="uq_company_api_keys_company"),)


class CompanyData(Base):
    """Current dashboard data; version bumped by trigger on every write."""

    __tablename__ = "company_data"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    company_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(BIGINT, nullable=False, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )

    __table_args__ = (UniqueConstraint("company_id", name="uq_company_data_company"),)


class CompanyDataHistory(Base):
    """Snapshot of a superseded company_data version."""

    __tablename__ = "company_data_history"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    company_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    data: Mapped[dict] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(BIGINT, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )

    __table_args__ = (
        UniqueConstraint("company_id", "version", name="uq_company_data_history_version"),
    )


class CompanyOnboarding(Base):
    """Onboarding state document per company."""

    __tablename__ = "company_onboarding"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    company_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    state: Mapped[dict] = mapped_column(JSON, nullable=False)
    completed: Mapped[bool] = mapped_column(
        BOOLEAN, nullable=False, default=False, server_default=text("false")
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )

    __table_args__ = (UniqueConstraint("company_id", name="uq_company_onboarding_company"),)


class CompanyVerificationSettings(Base):
    """Sender identity, prevention checklist, domain and email template."""

    __tablename__ = "company_verification_settings"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()")
    )
    company_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    sender_email: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    sender_name: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    sender_id: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    is_verified: Mapped[bool] = mapped_column(
        BOOLEAN, nullable=False, default=False, server_default=text("false")
    )
    prevention_steps: Mapped[dict] = mapped_column(JSON, nullable=False)
    domain: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    domain_brevo_id: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    domain_dns_records: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    email_template: Mapped[Optional[str]] = mapped_column(TEXT, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, default=_utcnow, server_default=text("now()")
    )

    __table_args__ = (
        UniqueConstraint("company_id", name="uq_company_verification_settings_company"),
    )
