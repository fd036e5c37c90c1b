"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


class GUID(sa.TypeDecorator):
    impl = sa.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(sa.CHAR(36))


def upgrade() -> None:
    op.create_table(
        "user_roles",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_external", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("can_access_mis", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("portfolio_permission", sa.JSON(), nullable=True),
        sa.Column("property_permission", sa.JSON(), nullable=True),
        sa.Column("audit_permission", sa.JSON(), nullable=True),
        sa.Column("user_permission", sa.JSON(), nullable=True),
        sa.Column("system_settings_permission", sa.JSON(), nullable=True),
        sa.Column("bank_details_permission", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role_id", GUID(), sa.ForeignKey("user_roles.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role_id", "users", ["role_id"], unique=False)
    op.create_table(
        "user_access_records",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("portfolio_ids", sa.JSON(), nullable=False),
        sa.Column("property_ids", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("user_id", name="uq_user_access_records_user_id"),
    )
    op.create_table(
        "portfolios",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("contact_email", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "properties",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("portfolio_id", GUID(), sa.ForeignKey("portfolios.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_properties_portfolio_id", "properties", ["portfolio_id"], unique=False)
    op.create_table(
        "audits",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("property_id", GUID(), sa.ForeignKey("properties.id"), nullable=False),
        sa.Column("amount_confirmed", sa.Numeric(14, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_audits_property_id", "audits", ["property_id"], unique=False)
    op.create_table(
        "pending_actions",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("resource_type", sa.String(length=50), nullable=False),
        sa.Column("property_id", GUID(), sa.ForeignKey("properties.id"), nullable=True),
        sa.Column("portfolio_id", GUID(), sa.ForeignKey("portfolios.id"), nullable=True),
        sa.Column("audit_id", GUID(), sa.ForeignKey("audits.id"), nullable=True),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("requested_user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("transfer_data", sa.JSON(), nullable=True),
        sa.Column("audit_update_data", sa.JSON(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("approval_user_id", GUID(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_pending_actions_status_created", "pending_actions", ["status", "created_at"], unique=False)
    op.create_index("ix_pending_actions_property", "pending_actions", ["property_id"], unique=False)
    op.create_index("ix_pending_actions_audit", "pending_actions", ["audit_id"], unique=False)
    op.create_table(
        "audit_events",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("user_id", GUID(), nullable=True),
        sa.Column("trace_id", sa.String(length=64), nullable=True),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=True),
        sa.Column("before_payload", sa.JSON(), nullable=True),
        sa.Column("after_payload", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("result", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_events_user_id", "audit_events", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_audit_events_user_id", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_index("ix_pending_actions_audit", table_name="pending_actions")
    op.drop_index("ix_pending_actions_property", table_name="pending_actions")
    op.drop_index("ix_pending_actions_status_created", table_name="pending_actions")
    op.drop_table("pending_actions")
    op.drop_index("ix_audits_property_id", table_name="audits")
    op.drop_table("audits")
    op.drop_index("ix_properties_portfolio_id", table_name="properties")
    op.drop_table("properties")
    op.drop_table("portfolios")
    op.drop_table("user_access_records")
    op.drop_index("ix_users_role_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_table("user_roles")
