"""create users, projects and collaboration request tables

Revision ID: 20261018_collaborations
Revises:
Create Date: 2026-10-18
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_collaborations"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("university", sa.String(length=255)),
        sa.Column("department", sa.String(length=255)),
        sa.Column("profile_image", sa.String(length=1024)),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="student"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "projects",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="Planned"),
        sa.Column("creator_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_projects_creator_id", "projects", ["creator_id"])

    op.create_table(
        "project_collaborators",
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    request_status = sa.Enum("pending", "accepted", "declined", "cancelled", name="connection_request_status")
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        request_status.create(bind, checkfirst=True)

    op.create_table(
        "connection_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("requester_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("recipient_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("response_message", sa.Text()),
        sa.Column("status", postgresql.ENUM("pending", "accepted", "declined", "cancelled", name="connection_request_status", create_type=False), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("requester_id <> recipient_id", name="ck_connection_request_distinct_parties"),
    )
    op.create_index("ix_connection_requests_requester_id", "connection_requests", ["requester_id"])
    op.create_index("ix_connection_requests_recipient_id", "connection_requests", ["recipient_id"])
    op.create_index("ix_connection_requests_project_id", "connection_requests", ["project_id"])
    op.create_index(
        "uq_connection_request_scoped",
        "connection_requests",
        ["requester_id", "recipient_id", "project_id"],
        unique=True,
        postgresql_where=sa.text("project_id IS NOT NULL"),
        sqlite_where=sa.text("project_id IS NOT NULL"),
    )
    op.create_index(
        "uq_connection_request_general",
        "connection_requests",
        ["requester_id", "recipient_id"],
        unique=True,
        postgresql_where=sa.text("project_id IS NULL"),
        sqlite_where=sa.text("project_id IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_connection_request_general", table_name="connection_requests")
    op.drop_index("uq_connection_request_scoped", table_name="connection_requests")
    op.drop_index("ix_connection_requests_project_id", table_name="connection_requests")
    op.drop_index("ix_connection_requests_recipient_id", table_name="connection_requests")
    op.drop_index("ix_connection_requests_requester_id", table_name="connection_requests")
    op.drop_table("connection_requests")

    request_status = sa.Enum("pending", "accepted", "declined", "cancelled", name="connection_request_status")
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        request_status.drop(bind, checkfirst=True)

    op.drop_table("project_collaborators")
    op.drop_index("ix_projects_creator_id", table_name="projects")
    op.drop_table("projects")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
