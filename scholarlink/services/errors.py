"""Typed failures raised by the collaboration request workflow."""
from __future__ import annotations

from fastapi import status


class ConnectionServiceError(RuntimeError):
    """Base class for every failure that crosses the service boundary."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "server_error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    @property
    def detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ValidationError(ConnectionServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class InvalidSelfRequest(ValidationError):
    code = "invalid_self_request"

    def __init__(self) -> None:
        super().__init__("Cannot send collaboration request to yourself")


class InvalidDecision(ValidationError):
    code = "invalid_decision"

    def __init__(self, decision: str) -> None:
        super().__init__(f'Invalid status "{decision}". Must be "accepted" or "declined"')


class NotFoundError(ConnectionServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidScopeReference(NotFoundError):
    code = "invalid_scope_reference"

    def __init__(self) -> None:
        super().__init__("Project not found")


class ForbiddenError(ConnectionServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class ConflictError(ConnectionServiceError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class DuplicateRequest(ConflictError):
    code = "duplicate_request"

    def __init__(self) -> None:
        super().__init__("Collaboration request already exists")


class AlreadyResolved(ConflictError):
    code = "already_resolved"

    def __init__(self) -> None:
        super().__init__("Request has already been responded to")


class ServerError(ConnectionServiceError):
    pass


__all__ = [
    "ConnectionServiceError",
    "ValidationError",
    "InvalidSelfRequest",
    "InvalidDecision",
    "NotFoundError",
    "InvalidScopeReference",
    "ForbiddenError",
    "ConflictError",
    "DuplicateRequest",
    "AlreadyResolved",
    "ServerError",
]
