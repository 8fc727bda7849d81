"""initial_schema

Unshared Labs schema:
- companies, profiles, company_invitations, company_api_keys
- company_data (+ company_data_history, versioned by trigger)
- company_onboarding, company_verification_settings
- RPC functions used by the API for atomic multi-row changes:
    demote_company_admin(p_profile_id, p_company_id) -> boolean
    delete_company_cascade(p_company_id) -> integer
- RLS enabled on every table (default deny; the API uses the service role)

Revision ID: 3f1c9a2e7b10
Revises:
Create Date: 2026-10-01 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '3f1c9a2e7b10'
down_revision = None
branch_labels = None
depends_on = None

TABLES = (
    "companies",
    "profiles",
    "company_invitations",
    "company_api_keys",
    "company_data",
    "company_data_history",
    "company_onboarding",
    "company_verification_settings",
)


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.TIMESTAMP(timezone=True), nullable=True)
    return sa.Column(name, sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("now()"))


def _company_fk(ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(
        "company_id",
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey("companies.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    # ====================================================================
    # Part 1: Tables
    # ====================================================================
    op.create_table(
        "companies",
        _id_column(),
        sa.Column("name", sa.TEXT(), nullable=False),
        sa.Column("website_url", sa.TEXT(), nullable=True),
        sa.Column("logo_url", sa.TEXT(), nullable=True),
        sa.Column("logo_path", sa.TEXT(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "profiles",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=False), nullable=False, unique=True),
        sa.Column("email", sa.TEXT(), nullable=False),
        sa.Column("name", sa.TEXT(), nullable=True),
        sa.Column("role", sa.TEXT(), nullable=False, server_default="client"),
        _company_fk(ondelete="SET NULL", nullable=True),
        sa.Column("company_role", sa.TEXT(), nullable=False, server_default="member"),
        _timestamp("created_at"),
        sa.CheckConstraint("role IN ('client', 'super_admin')", name="ck_profiles_role"),
        sa.CheckConstraint("company_role IN ('admin', 'member')", name="ck_profiles_company_role"),
    )
    op.create_index("idx_profiles_company", "profiles", ["company_id"])
    op.create_index("idx_profiles_email", "profiles", ["email"])

    op.create_table(
        "company_invitations",
        _id_column(),
        _company_fk(),
        sa.Column("email", sa.TEXT(), nullable=False),
        sa.Column("role", sa.TEXT(), nullable=False, server_default="client"),
        sa.Column("company_role", sa.TEXT(), nullable=False, server_default="member"),
        sa.Column("token", sa.TEXT(), nullable=False, unique=True),
        sa.Column("invited_by", postgresql.UUID(as_uuid=False), nullable=True),
        _timestamp("created_at"),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        _timestamp("accepted_at", nullable=True),
        sa.CheckConstraint(
            "company_role IN ('admin', 'member')", name="ck_company_invitations_company_role"
        ),
    )
    op.create_index("idx_company_invitations_company", "company_invitations", ["company_id"])
    op.create_index("idx_company_invitations_email", "company_invitations", ["email"])

    op.create_table(
        "company_api_keys",
        _id_column(),
        _company_fk(),
        sa.Column("api_key", sa.TEXT(), nullable=False, unique=True),
        _timestamp("created_at"),
        sa.UniqueConstraint("company_id", name="uq_company_api_keys_company"),
    )

    op.create_table(
        "company_data",
        _id_column(),
        _company_fk(),
        sa.Column("data", postgresql.JSONB(), nullable=False),
        sa.Column("version", sa.BIGINT(), nullable=False, server_default="1"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("company_id", name="uq_company_data_company"),
    )

    op.create_table(
        "company_data_history",
        _id_column(),
        _company_fk(),
        sa.Column("data", postgresql.JSONB(), nullable=False),
        sa.Column("version", sa.BIGINT(), nullable=False),
        _timestamp("created_at"),
        sa.UniqueConstraint("company_id", "version", name="uq_company_data_history_version"),
    )

    op.create_table(
        "company_onboarding",
        _id_column(),
        _company_fk(),
        sa.Column("state", postgresql.JSONB(), nullable=False),
        sa.Column("completed", sa.BOOLEAN(), nullable=False, server_default=sa.text("false")),
        _timestamp("completed_at", nullable=True),
        _timestamp("updated_at"),
        sa.UniqueConstraint("company_id", name="uq_company_onboarding_company"),
    )

    op.create_table(
        "company_verification_settings",
        _id_column(),
        _company_fk(),
        sa.Column("sender_email", sa.TEXT(), nullable=True),
        sa.Column("sender_name", sa.TEXT(), nullable=True),
        sa.Column("sender_id", sa.TEXT(), nullable=True),
        sa.Column("is_verified", sa.BOOLEAN(), nullable=False, server_default=sa.text("false")),
        sa.Column("prevention_steps", postgresql.JSONB(), nullable=False),
        sa.Column("domain", sa.TEXT(), nullable=True),
        sa.Column("domain_brevo_id", sa.TEXT(), nullable=True),
        sa.Column("domain_dns_records", postgresql.JSONB(), nullable=True),
        sa.Column("email_template", sa.TEXT(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("company_id", name="uq_company_verification_settings_company"),
    )

    # ====================================================================
    # Part 2: company_data versioning
    # ====================================================================
    # BEFORE: version 1 on insert, previous + 1 on update (upsert conflict path)
    # AFTER: every written version is snapshotted into company_data_history
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.company_data_bump_version()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
            IF TG_OP = 'UPDATE' THEN
                NEW.version := OLD.version + 1;
                NEW.created_at := OLD.created_at;
            ELSE
                NEW.version := 1;
            END IF;
            NEW.updated_at := now();
            RETURN NEW;
        END;
        $$;
        """
    )
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.company_data_record_history()
        RETURNS trigger
        LANGUAGE plpgsql
        AS $$
        BEGIN
            INSERT INTO public.company_data_history (company_id, data, version, created_at)
            VALUES (NEW.company_id, NEW.data, NEW.version, NEW.updated_at);
            RETURN NEW;
        END;
        $$;
        """
    )
    op.execute(
        "CREATE TRIGGER trg_company_data_bump_version BEFORE INSERT OR UPDATE "
        "ON public.company_data FOR EACH ROW EXECUTE FUNCTION public.company_data_bump_version();"
    )
    op.execute(
        "CREATE TRIGGER trg_company_data_record_history AFTER INSERT OR UPDATE "
        "ON public.company_data FOR EACH ROW EXECUTE FUNCTION public.company_data_record_history();"
    )

    # ====================================================================
    # Part 3: RPC functions
    # ====================================================================
    # Last-admin guard: the count and the update run in one statement under
    # a row lock on every admin of the company.
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.demote_company_admin(p_profile_id uuid, p_company_id uuid)
        RETURNS boolean
        LANGUAGE plpgsql
        AS $$
        DECLARE
            admin_count integer;
        BEGIN
            PERFORM 1 FROM public.profiles
             WHERE company_id = p_company_id AND company_role = 'admin'
             FOR UPDATE;

            SELECT count(*) INTO admin_count FROM public.profiles
             WHERE company_id = p_company_id AND company_role = 'admin';

            IF admin_count <= 1 THEN
                RETURN false;
            END IF;

            UPDATE public.profiles
               SET company_role = 'member'
             WHERE id = p_profile_id AND company_id = p_company_id;
            RETURN FOUND;
        END;
        $$;
        """
    )
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.delete_company_cascade(p_company_id uuid)
        RETURNS integer
        LANGUAGE plpgsql
        AS $$
        DECLARE
            detached integer;
        BEGIN
            UPDATE public.profiles
               SET company_id = NULL, company_role = 'member'
             WHERE company_id = p_company_id;
            GET DIAGNOSTICS detached = ROW_COUNT;

            DELETE FROM public.companies WHERE id = p_company_id;
            RETURN detached;
        END;
        $$;
        """
    )

    # ====================================================================
    # Part 4: Enable RLS (default deny, no policies)
    # ====================================================================
    for table in TABLES:
        op.execute(f"ALTER TABLE public.{table} ENABLE ROW LEVEL SECURITY;")


def downgrade() -> None:
    for table in reversed(TABLES):
        op.execute(f"ALTER TABLE public.{table} DISABLE ROW LEVEL SECURITY;")

    op.execute("DROP FUNCTION IF EXISTS public.delete_company_cascade(uuid);")
    op.execute("DROP FUNCTION IF EXISTS public.demote_company_admin(uuid, uuid);")
    op.execute("DROP TRIGGER IF EXISTS trg_company_data_record_history ON public.company_data;")
    op.execute("DROP TRIGGER IF EXISTS trg_company_data_bump_version ON public.company_data;")
    op.execute("DROP FUNCTION IF EXISTS public.company_data_record_history();")
    op.execute("DROP FUNCTION IF EXISTS public.company_data_bump_version();")

    for table in reversed(TABLES):
        op.drop_table(table)
