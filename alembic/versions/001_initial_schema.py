"""Initial schema - users, resources, permissions, secrets, favorites, action logs.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all domain tables."""

    # 1. users (no FKs)
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False, unique=True),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(50), server_default="user", nullable=False),
        sa.Column("active", sa.Boolean, server_default="true", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # 2. resources (FKs to users)
    op.create_table(
        "resources",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("username", sa.String(255), nullable=True),
        sa.Column("uri", sa.String(1024), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("deleted", sa.Boolean, server_default="false", nullable=False),
        sa.Column("created_by", UUID(as_uuid=False), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("modified_by", UUID(as_uuid=False), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # 3. permissions (FK to resources)
    op.create_table(
        "permissions",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("aco", sa.String(30), nullable=False),
        sa.Column("aco_foreign_key", UUID(as_uuid=False), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("aro", sa.String(30), nullable=False),
        sa.Column("aro_foreign_key", UUID(as_uuid=False), nullable=False),
        sa.Column("type", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("aco_foreign_key", "aro_foreign_key", name="uq_permission_aco_aro"),
    )
    op.create_index("ix_permissions_aco_foreign_key", "permissions", ["aco_foreign_key"])
    op.create_index("ix_permissions_aro_foreign_key", "permissions", ["aro_foreign_key"])

    # 4. secrets (FKs to resources, users)
    op.create_table(
        "secrets",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("resource_id", UUID(as_uuid=False), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("data", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("resource_id", "user_id", name="uq_secret_resource_user"),
    )
    op.create_index("ix_secrets_resource_id", "secrets", ["resource_id"])
    op.create_index("ix_secrets_user_id", "secrets", ["user_id"])

    # 5. favorites (FKs to users, resources)
    op.create_table(
        "favorites",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("foreign_model", sa.String(30), server_default="Resource", nullable=False),
        sa.Column("foreign_key", UUID(as_uuid=False), sa.ForeignKey("resources.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "foreign_key", name="uq_favorite_user_foreign_key"),
    )
    op.create_index("ix_favorites_foreign_key", "favorites", ["foreign_key"])

    # 6. action_logs (FK to users)
    op.create_table(
        "action_logs",
        sa.Column("id", UUID(as_uuid=False), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=False), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("resource_id", UUID(as_uuid=False), nullable=True),
        sa.Column("details", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_action_logs_user_id", "action_logs", ["user_id"])
    op.create_index("ix_action_logs_action", "action_logs", ["action"])


def downgrade() -> None:
    """Drop all domain tables in reverse dependency order."""
    op.drop_table("action_logs")
    op.drop_table("favorites")
    op.drop_table("secrets")
    op.drop_table("permissions")
    op.drop_table("resources")
    op.drop_table("users")
