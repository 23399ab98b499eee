"""Authorization and status-transition rules for collaboration requests."""
from __future__ import annotations

from enum import StrEnum
from typing import Mapping

from ..identifiers import UserId
from ..models import ConnectionRequest, RequestStatus
from .errors import AlreadyResolved, ForbiddenError, InvalidDecision


class RequestAction(StrEnum):
    RESPOND = "respond"
    CANCEL = "cancel"


RESPONSE_DECISIONS: frozenset[RequestStatus] = frozenset({RequestStatus.ACCEPTED, RequestStatus.DECLINED})

# Cancellation is a hard delete, so it never appears here.
_TRANSITIONS: Mapping[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: RESPONSE_DECISIONS,
}


def authorize(caller_id: UserId, request: ConnectionRequest, action: RequestAction) -> None:
    """Raise :class:`ForbiddenError` unless ``caller_id`` may perform ``action``."""

    if action is RequestAction.RESPOND:
        if request.recipient_id != caller_id:
            raise ForbiddenError("Unauthorized to respond to this request")
        return
    if not request.involves(caller_id):
        raise ForbiddenError("Unauthorized to cancel this request")


def parse_decision(value: str | None) -> RequestStatus:
    normalized = (value or "").strip().lower()
    try:
        decision = RequestStatus(normalized)
    except ValueError:
        raise InvalidDecision(normalized) from None
    if decision not in RESPONSE_DECISIONS:
        raise InvalidDecision(normalized)
    return decision


def can_transition(current: str, target: RequestStatus) -> bool:
    try:
        source = RequestStatus(current)
    except ValueError:
        return False
    return target in _TRANSITIONS.get(source, frozenset())


def ensure_transition(current: str, target: RequestStatus) -> None:
    if not can_transition(current, target):
        raise AlreadyResolved()


__all__ = [
    "RESPONSE_DECISIONS",
    "RequestAction",
    "authorize",
    "can_transition",
    "ensure_transition",
    "parse_decision",
]
