"""Convenience exports for ORM models."""
from .associations import project_collaborators
from .connection_request import ConnectionRequest, RequestStatus
from .project import Project
from .user import User

__all__ = [
    "project_collaborators",
    "ConnectionRequest",
    "RequestStatus",
    "Project",
    "User",
]
