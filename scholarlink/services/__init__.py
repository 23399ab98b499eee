"""Convenience exports for service layer."""
from .auth_service import (
    authenticate_user,
    create_access_token,
    decode_access_token,
    get_current_caller,
    get_current_user,
    register_user,
)
from .connection_service import REQUEST_DIRECTIONS, CallerIdentity, ConnectionService
from .directory import ProjectMembershipError, ProjectStore, UserDirectory
from .errors import (
    AlreadyResolved,
    ConflictError,
    ConnectionServiceError,
    DuplicateRequest,
    ForbiddenError,
    InvalidDecision,
    InvalidScopeReference,
    InvalidSelfRequest,
    NotFoundError,
    ServerError,
    ValidationError,
)
from .membership_dispatcher import MembershipDispatcher, MembershipJob, get_membership_dispatcher

__all__ = [
    "authenticate_user",
    "create_access_token",
    "decode_access_token",
    "get_current_caller",
    "get_current_user",
    "register_user",
    "REQUEST_DIRECTIONS",
    "CallerIdentity",
    "ConnectionService",
    "ProjectMembershipError",
    "ProjectStore",
    "UserDirectory",
    "AlreadyResolved",
    "ConflictError",
    "ConnectionServiceError",
    "DuplicateRequest",
    "ForbiddenError",
    "InvalidDecision",
    "InvalidScopeReference",
    "InvalidSelfRequest",
    "NotFoundError",
    "ServerError",
    "ValidationError",
    "MembershipDispatcher",
    "MembershipJob",
    "get_membership_dispatcher",
]
