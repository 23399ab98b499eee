"""ORM model representing collaboration requests between users."""
from __future__ import annotations

import uuid
from enum import StrEnum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Index, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from scholarlink.database import Base


class RequestStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"


class ConnectionRequest(Base):
    __tablename__ = "connection_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    requester_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(UUID(as_uuid=True), ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True)
    message = Column(Text, nullable=False)
    response_message = Column(Text, nullable=True)
    status = Column(
        Enum(*(item.value for item in RequestStatus), name="connection_request_status"),
        nullable=False,
        default=RequestStatus.PENDING.value,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    requester = relationship("User", foreign_keys=[requester_id], back_populates="connection_requests_sent")
    recipient = relationship("User", foreign_keys=[recipient_id], back_populates="connection_requests_received")
    project = relationship("Project")

    # NULL scopes never collide in a plain unique constraint, so general requests get their own index.
    __table_args__ = (
        CheckConstraint("requester_id <> recipient_id", name="ck_connection_request_distinct_parties"),
        Index(
            "uq_connection_request_scoped",
            "requester_id",
            "recipient_id",
            "project_id",
            unique=True,
            postgresql_where=text("project_id IS NOT NULL"),
            sqlite_where=text("project_id IS NOT NULL"),
        ),
        Index(
            "uq_connection_request_general",
            "requester_id",
            "recipient_id",
            unique=True,
            postgresql_where=text("project_id IS NULL"),
            sqlite_where=text("project_id IS NULL"),
        ),
    )

    def involves(self, user_id: uuid.UUID) -> bool:
        return user_id in {self.requester_id, self.recipient_id}

    def counterpart_of(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.recipient_id if self.requester_id == user_id else self.requester_id


__all__ = ["ConnectionRequest", "RequestStatus"]
