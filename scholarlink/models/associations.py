"""Association tables shared across ORM models."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Table
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from scholarlink.database import Base

# The composite primary key makes adding an existing collaborator a conflict rather than a second row.
project_collaborators = Table(
    "project_collaborators",
    Base.metadata,
    Column("project_id", UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("added_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


__all__ = ["project_collaborators"]
