"""Initial schema: users, reviewable entities, approval history, pledges, notifications, audit_logs

Revision ID: 0001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _approval_columns(table: str) -> list:
    """Columns shared by every reviewable entity table."""
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("approval_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("rejected_by", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], name=f"fk_{table}_owner_id_users"),
        sa.ForeignKeyConstraint(
            ["approved_by"],
            ["users.id"],
            name=f"fk_{table}_approved_by_users",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["rejected_by"],
            ["users.id"],
            name=f"fk_{table}_rejected_by_users",
            ondelete="SET NULL",
        ),
    ]


def _approval_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_owner_id", table, ["owner_id"])
    op.create_index(f"ix_{table}_approval_status", table, ["approval_status"])
    op.create_index(f"ix_{table}_created_at", table, ["created_at"])


def upgrade() -> None:
    """Create all tables."""

    # --- users (no FK deps) ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255)),
        sa.Column("role", sa.String(50), nullable=False, server_default="innovator"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])

    # --- projects (FK -> users) ---
    op.create_table(
        "projects",
        *_approval_columns("projects"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("problem_statement", sa.Text(), nullable=True),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("institution", sa.String(255), nullable=True),
        sa.Column("funding_needed", sa.Numeric(15, 2), nullable=True),
        sa.Column("project_status", sa.String(20), nullable=False, server_default="submitted"),
    )
    _approval_indexes("projects")
    op.create_index("ix_projects_category", "projects", ["category"])
    op.create_index("ix_projects_project_status", "projects", ["project_status"])

    # --- funding_applications (FK -> users; project_id is a weak reference) ---
    op.create_table(
        "funding_applications",
        *_approval_columns("funding_applications"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("amount_approved", sa.Numeric(15, 2), nullable=True),
        sa.Column("currency", sa.String(3), nullable=False, server_default="TZS"),
        sa.Column("grant_type", sa.String(50), nullable=False, server_default="research"),
        sa.Column("project_id", sa.Integer(), nullable=True),
        sa.Column("funding_status", sa.String(20), nullable=False, server_default="pending"),
    )
    _approval_indexes("funding_applications")
    op.create_index("ix_funding_applications_project_id", "funding_applications", ["project_id"])
    op.create_index("ix_funding_applications_funding_status", "funding_applications", ["funding_status"])

    # --- ip_records (FK -> users) ---
    op.create_table(
        "ip_records",
        *_approval_columns("ip_records"),
        sa.Column("ip_type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("inventors", sa.Text(), nullable=True),
        sa.Column("abstract", sa.Text(), nullable=False),
        sa.Column("field", sa.String(255), nullable=True),
        sa.Column("trl", sa.Integer(), nullable=True),
        sa.Column("prior_art", sa.Text(), nullable=True),
        sa.Column("status", sa.String(100), nullable=False, server_default="Submitted"),
        sa.Column("identification_numbers", sa.JSON(), nullable=False, server_default="{}"),
        sa.Column("project_id", sa.Integer(), nullable=True),
    )
    _approval_indexes("ip_records")
    op.create_index("ix_ip_records_ip_type", "ip_records", ["ip_type"])
    op.create_index("ix_ip_records_status", "ip_records", ["status"])
    op.create_index("ix_ip_records_project_id", "ip_records", ["project_id"])

    # --- approval_history (FK -> users) ---
    op.create_table(
        "approval_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entity_kind", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("from_state", sa.String(20), nullable=True),
        sa.Column("to_state", sa.String(20), nullable=False),
        sa.Column("transition", sa.String(50), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("extra_data", sa.JSON(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_approval_history"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_approval_history_user_id_users",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_approval_history_entity", "approval_history", ["entity_kind", "entity_id"])
    op.create_index("ix_approval_history_created_at", "approval_history", ["created_at"])

    # --- funding_pledges (FK -> funding_applications, users) ---
    op.create_table(
        "funding_pledges",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("funding_id", sa.Integer(), nullable=False),
        sa.Column("pledger_id", sa.Integer(), nullable=True),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pledged"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_funding_pledges"),
        sa.ForeignKeyConstraint(
            ["funding_id"],
            ["funding_applications.id"],
            name="fk_funding_pledges_funding_id_funding_applications",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["pledger_id"],
            ["users.id"],
            name="fk_funding_pledges_pledger_id_users",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_funding_pledges_funding_id", "funding_pledges", ["funding_id"])
    op.create_index("ix_funding_pledges_pledger_id", "funding_pledges", ["pledger_id"])

    # --- notifications (FK -> users) ---
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="info"),
        sa.Column("link", sa.String(512), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_notifications"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_notifications_user_id_users",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])

    # --- audit_logs (FK -> users) ---
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("user_role", sa.String(50), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("resource_type", sa.String(100), nullable=False),
        sa.Column("resource_id", sa.Integer(), nullable=True),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("severity", sa.String(20), nullable=False, server_default="info"),
        sa.Column("request_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_audit_logs"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_audit_logs_user_id_users",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_resource_type", "audit_logs", ["resource_type"])
    op.create_index("ix_audit_logs_resource_id", "audit_logs", ["resource_id"])
    op.create_index("ix_audit_logs_severity", "audit_logs", ["severity"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("audit_logs")
    op.drop_table("notifications")
    op.drop_table("funding_pledges")
    op.drop_table("approval_history")
    op.drop_table("ip_records")
    op.drop_table("funding_applications")
    op.drop_table("projects")
    op.drop_table("users")
