"""SQLAlchemy ORM model for platform members."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from scholarlink.database import Base
from .associations import project_collaborators


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(150), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    university = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    profile_image = Column(String(1024), nullable=True)
    role = Column(String(32), nullable=False, server_default="student", default="student")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    owned_projects = relationship("Project", back_populates="creator", cascade="all, delete-orphan")
    collaborating_projects = relationship("Project", secondary=project_collaborators, back_populates="collaborators")
    connection_requests_sent = relationship(
        "ConnectionRequest",
        foreign_keys="ConnectionRequest.requester_id",
        back_populates="requester",
        cascade="all, delete-orphan",
    )
    connection_requests_received = relationship(
        "ConnectionRequest",
        foreign_keys="ConnectionRequest.recipient_id",
        back_populates="recipient",
        cascade="all, delete-orphan",
    )


__all__ = ["User"]
