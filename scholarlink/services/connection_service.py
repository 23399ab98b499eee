"""Business logic for collaboration requests between members."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, cast
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..identifiers import ProjectId, RequestId, UserId
from ..models import ConnectionRequest, RequestStatus, User
from ..schemas import ConnectionRequestResponse, ConnectionStatusResponse, MenteeEntry
from .connection_rules import RequestAction, authorize, ensure_transition, parse_decision
from .connection_store import RequestStore
from .connection_views import build_mentee_view, build_request_view, resolve_status_label
from .directory import ProjectStore, UserDirectory
from .errors import (
    AlreadyResolved,
    DuplicateRequest,
    InvalidScopeReference,
    InvalidSelfRequest,
    NotFoundError,
    ServerError,
    ValidationError,
)
from .membership_dispatcher import MembershipDispatcher, MembershipJob, get_membership_dispatcher

logger = logging.getLogger(__name__)

REQUEST_DIRECTIONS = ("sent", "received", "all")


@dataclass(frozen=True, slots=True)
class CallerIdentity:
    """Already-authenticated caller; never derived from request payloads."""

    id: UserId

    @classmethod
    def from_user(cls, user: User) -> "CallerIdentity":
        return cls(id=UserId(cast(UUID, user.id)))


class ConnectionService:
    def __init__(
        self,
        db: Session,
        *,
        store: RequestStore | None = None,
        users: UserDirectory | None = None,
        projects: ProjectStore | None = None,
        dispatcher: MembershipDispatcher | None = None,
        default_message: str | None = None,
    ) -> None:
        self._db = db
        self.store = store or RequestStore(db)
        self.users = users or UserDirectory(db)
        self.projects = projects or ProjectStore(db)
        self.dispatcher = dispatcher or get_membership_dispatcher()
        self._default_message = default_message or get_settings().default_request_message

    @contextmanager
    def _storage_guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("Storage failure while %s", action)
            raise ServerError(f"Server error while {action}") from exc

    def _view(self, record: ConnectionRequest) -> ConnectionRequestResponse:
        return build_request_view(record, summarize=self.users.identity_summary)

    def create_request(
        self,
        caller: CallerIdentity,
        recipient_id: UserId,
        *,
        message: str | None = None,
        project_id: ProjectId | None = None,
    ) -> ConnectionRequestResponse:
        if caller.id == recipient_id:
            raise InvalidSelfRequest()

        with self._storage_guard("sending collaboration request"):
            if not self.users.exists(recipient_id):
                raise NotFoundError("Recipient not found")
            if project_id is not None and not self.projects.exists(project_id):
                raise InvalidScopeReference()

            # Advisory only: the unique indexes settle concurrent inserts.
            if self.store.exists_for(caller.id, recipient_id, project_id):
                raise DuplicateRequest()

            text = (message or "").strip() or self._default_message
            record = self.store.insert(
                requester_id=caller.id,
                recipient_id=recipient_id,
                project_id=project_id,
                message=text,
            )
            return self._view(record)

    def get_status(self, caller: CallerIdentity, other_user_id: UserId) -> ConnectionStatusResponse:
        with self._storage_guard("checking collaboration status"):
            record = self.store.latest_between(caller.id, other_user_id)
            return ConnectionStatusResponse(
                status=resolve_status_label(record, caller.id),
                data=self._view(record) if record is not None else None,
            )

    def list_requests(self, caller: CallerIdentity, direction: str = "all") -> list[ConnectionRequestResponse]:
        if direction not in REQUEST_DIRECTIONS:
            raise ValidationError('Invalid type. Must be "sent", "received" or "all"')
        with self._storage_guard("fetching collaboration requests"):
            return [self._view(record) for record in self.store.list_for(caller.id, direction)]

    def list_mentees(self, caller: CallerIdentity) -> list[MenteeEntry]:
        with self._storage_guard("fetching mentees"):
            return build_mentee_view(
                self.store.list_accepted_for(caller.id), caller.id, summarize=self.users.identity_summary
            )

    def respond(
        self,
        caller: CallerIdentity,
        request_id: RequestId,
        decision: str,
        response_message: str | None = None,
    ) -> ConnectionRequestResponse:
        target = parse_decision(decision)

        with self._storage_guard("responding to collaboration request"):
            record = self.store.get(request_id)
            if record is None:
                raise NotFoundError("Collaboration request not found")
            authorize(caller.id, record, RequestAction.RESPOND)
            ensure_transition(record.status, target)

            if not self.store.transition(
                request_id,
                expected=RequestStatus.PENDING,
                target=target,
                response_message=response_message,
            ):
                logger.info("Request %s was resolved concurrently; %s discarded", request_id, target)
                raise AlreadyResolved()

            updated = self.store.get(request_id)
            if updated is None:
                raise NotFoundError("Collaboration request not found")
            view = self._view(updated)

        if target is RequestStatus.ACCEPTED and updated.project_id is not None:
            job = MembershipJob(
                request_id=request_id,
                project_id=ProjectId(cast(UUID, updated.project_id)),
                user_id=UserId(cast(UUID, updated.recipient_id)),
            )
            try:
                self.dispatcher.dispatch(job)
            except Exception:
                # The acceptance is already committed.
                logger.exception("Membership dispatch failed for request %s", request_id)
        return view

    def cancel(self, caller: CallerIdentity, request_id: RequestId) -> RequestId:
        """Delete the request at any status.

        Project membership granted by an earlier acceptance is left in place.
        """

        with self._storage_guard("cancelling collaboration request"):
            record = self.store.get(request_id)
            if record is None:
                raise NotFoundError("Collaboration request not found")
            authorize(caller.id, record, RequestAction.CANCEL)
            if not self.store.delete(request_id):
                raise NotFoundError("Collaboration request not found")
        logger.info("Collaboration request %s cancelled by %s", request_id, caller.id)
        return request_id


__all__ = ["CallerIdentity", "ConnectionService", "REQUEST_DIRECTIONS"]
