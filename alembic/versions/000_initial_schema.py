"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Shared by ledger entries, requests and notifications
participant_kind = postgresql.ENUM("investor", "partner", name="participantkind", create_type=False)


def upgrade() -> None:
    """Create all initial tables."""
    participant_kind.create(op.get_bind(), checkfirst=True)

    # Staff users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("admin", "moderator", name="userrole"), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), default=True, nullable=False),
        sa.Column("last_active_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    # Investors
    op.create_table(
        "investors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
    )
    op.create_index("ix_investors_email", "investors", ["email"], unique=True)

    # Partners
    op.create_table(
        "partners",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column(
            "partner_type",
            sa.Enum("partner", "operator_partner", name="partnertype"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), default=True, nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
    )
    op.create_index("ix_partners_username", "partners", ["username"], unique=True)
    op.create_index("ix_partners_is_active", "partners", ["is_active"])

    # Profit split history
    op.create_table(
        "profit_configurations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("proportional_percentage", sa.Numeric(7, 4), nullable=False),
        sa.Column("exclusive_percentage", sa.Numeric(7, 4), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "proportional_percentage >= 0 AND exclusive_percentage >= 0",
            name="ck_profit_configurations_non_negative",
        ),
    )
    op.create_index("ix_profit_configurations_created_at", "profit_configurations", ["created_at"])

    # Accounting periods
    op.create_table(
        "accounting_periods",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sequence_number", sa.Integer(), nullable=False, unique=True),
        sa.Column("label", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("processed", sa.Boolean(), default=False, nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("processed_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("profit_percentage", sa.Numeric(7, 4), nullable=True),
        sa.Column("gross_profit_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("total_capital", sa.Numeric(14, 2), nullable=True),
        sa.Column("proportional_percentage", sa.Numeric(7, 4), nullable=True),
        sa.Column("exclusive_percentage", sa.Numeric(7, 4), nullable=True),
        sa.Column(
            "profit_configuration_id",
            sa.Integer(),
            sa.ForeignKey("profit_configurations.id"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.CheckConstraint("end_date >= start_date", name="ck_accounting_periods_date_order"),
    )
    # At most one pending period
    op.create_index(
        "uq_accounting_periods_single_pending",
        "accounting_periods",
        ["processed"],
        unique=True,
        postgresql_where=sa.text("NOT processed"),
    )

    # Deposit/withdrawal requests
    op.create_table(
        "approval_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("owner_kind", participant_kind, nullable=False),
        sa.Column("kind", sa.Enum("deposit", "withdrawal", name="requestkind"), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "approved", "rejected", name="requeststatus"),
            nullable=False,
        ),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decided_by_user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="ck_approval_requests_amount_positive"),
    )
    op.create_index("ix_approval_requests_owner_id", "approval_requests", ["owner_id"])
    op.create_index("ix_approval_requests_status", "approval_requests", ["status"])
    op.create_index(
        "uq_approval_requests_single_pending",
        "approval_requests",
        ["owner_kind", "owner_id", "kind"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    # Ledger
    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("owner_kind", participant_kind, nullable=False),
        sa.Column(
            "kind",
            sa.Enum("deposit", "withdrawal", "profit", name="entrykind"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("period_id", sa.Integer(), sa.ForeignKey("accounting_periods.id"), nullable=True),
        sa.Column(
            "request_id",
            sa.Integer(),
            sa.ForeignKey("approval_requests.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.CheckConstraint("amount > 0", name="ck_ledger_entries_amount_positive"),
    )
    op.create_index("ix_ledger_entries_owner", "ledger_entries", ["owner_kind", "owner_id"])
    op.create_index("ix_ledger_entries_kind", "ledger_entries", ["kind"])
    op.create_index("ix_ledger_entries_period_id", "ledger_entries", ["period_id"])

    # Notifications
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("owner_kind", participant_kind, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column(
            "severity",
            sa.Enum("info", "success", "warning", "error", name="notificationseverity"),
            nullable=False,
        ),
        sa.Column("is_read", sa.Boolean(), default=False, nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_notifications_owner", "notifications", ["owner_kind", "owner_id"])

    # Audit logs
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "action",
            sa.Enum(
                "login", "logout",
                "create_period", "update_period", "delete_period",
                "commit_distribution", "save_profit_config",
                "approve_request", "reject_request",
                "update_entry", "delete_entry",
                "update_partner", "delete_participant",
                name="auditaction",
            ),
            nullable=False,
        ),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("action_metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_table("audit_logs")
    op.drop_table("notifications")
    op.drop_table("ledger_entries")
    op.drop_table("approval_requests")
    op.drop_table("accounting_periods")
    op.drop_table("profit_configurations")
    op.drop_table("partners")
    op.drop_table("investors")
    op.drop_table("users")

    # Drop enums
    op.execute("DROP TYPE IF EXISTS auditaction")
    op.execute("DROP TYPE IF EXISTS notificationseverity")
    op.execute("DROP TYPE IF EXISTS entrykind")
    op.execute("DROP TYPE IF EXISTS requeststatus")
    op.execute("DROP TYPE IF EXISTS requestkind")
    op.execute("DROP TYPE IF EXISTS partnertype")
    op.execute("DROP TYPE IF EXISTS participantkind")
    op.execute("DROP TYPE IF EXISTS userrole")
