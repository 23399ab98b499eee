"""Schemas for collaboration requests and the views derived from them."""
from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

StatusLabel = Literal["none", "sent", "pending", "accepted", "declined", "cancelled"]
RequestDirection = Literal["sent", "received", "all"]


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str | None = None
    university: str | None = None
    department: str | None = None
    profile_image: str | None = None


class ProjectSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    status: str | None = None


class ConnectionRequestCreate(BaseModel):
    recipient_id: UUID = Field(..., validation_alias=AliasChoices("recipient_id", "recipientId"))
    project_id: UUID | None = Field(default=None, validation_alias=AliasChoices("project_id", "projectId"))
    message: str | None = Field(default=None, max_length=2000)


class ConnectionRespondPayload(BaseModel):
    # The original client posts the decision under "status".
    decision: str = Field(..., validation_alias=AliasChoices("decision", "status"))
    response_message: str | None = Field(
        default=None,
        max_length=2000,
        validation_alias=AliasChoices("response_message", "responseMessage"),
    )


class ConnectionRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    requester_id: UUID
    recipient_id: UUID
    project_id: UUID | None = None
    message: str
    response_message: str | None = None
    status: str
    created_at: datetime
    responded_at: datetime | None = None
    requester: UserSummary | None = None
    recipient: UserSummary | None = None
    project: ProjectSummary | None = None


class ConnectionStatusResponse(BaseModel):
    status: StatusLabel
    data: ConnectionRequestResponse | None = None


class ConnectionRequestListResponse(BaseModel):
    count: int
    data: list[ConnectionRequestResponse]


class ConnectionActionResponse(BaseModel):
    message: str
    data: ConnectionRequestResponse


class ConnectionCancelResponse(BaseModel):
    message: str
    request_id: UUID


class MenteeEntry(BaseModel):
    request_id: UUID
    mentee: UserSummary
    project: ProjectSummary | None = None
    created_at: datetime


class MenteeListResponse(BaseModel):
    count: int
    data: list[MenteeEntry]


__all__ = [
    "StatusLabel",
    "RequestDirection",
    "UserSummary",
    "ProjectSummary",
    "ConnectionRequestCreate",
    "ConnectionRespondPayload",
    "ConnectionRequestResponse",
    "ConnectionStatusResponse",
    "ConnectionRequestListResponse",
    "ConnectionActionResponse",
    "ConnectionCancelResponse",
    "MenteeEntry",
    "MenteeListResponse",
]
