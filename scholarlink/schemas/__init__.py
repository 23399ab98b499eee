"""Convenience exports for schema layer."""
from .auth import AuthResponse, LoginRequest, RegisterRequest
from .connections import (
    ConnectionActionResponse,
    ConnectionCancelResponse,
    ConnectionRequestCreate,
    ConnectionRequestListResponse,
    ConnectionRequestResponse,
    ConnectionRespondPayload,
    ConnectionStatusResponse,
    MenteeEntry,
    MenteeListResponse,
    ProjectSummary,
    RequestDirection,
    StatusLabel,
    UserSummary,
)

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "ConnectionActionResponse",
    "ConnectionCancelResponse",
    "ConnectionRequestCreate",
    "ConnectionRequestListResponse",
    "ConnectionRequestResponse",
    "ConnectionRespondPayload",
    "ConnectionStatusResponse",
    "MenteeEntry",
    "MenteeListResponse",
    "ProjectSummary",
    "RequestDirection",
    "StatusLabel",
    "UserSummary",
]
