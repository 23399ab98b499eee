"""Persistence for collaboration requests backed by SQLAlchemy."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Select, and_, delete, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..identifiers import ProjectId, RequestId, UserId
from ..models import ConnectionRequest, RequestStatus
from .errors import DuplicateRequest, ServerError

logger = logging.getLogger(__name__)


def _with_parties(stmt: Select) -> Select:
    return stmt.options(
        selectinload(ConnectionRequest.requester),
        selectinload(ConnectionRequest.recipient),
        selectinload(ConnectionRequest.project),
    ).execution_options(populate_existing=True)


def _scope_clause(project_id: ProjectId | None):
    if project_id is None:
        return ConnectionRequest.project_id.is_(None)
    return ConnectionRequest.project_id == project_id


def _tuple_lookup(requester_id: UserId, recipient_id: UserId, project_id: ProjectId | None) -> Select:
    return select(ConnectionRequest.id).where(
        ConnectionRequest.requester_id == requester_id,
        ConnectionRequest.recipient_id == recipient_id,
        _scope_clause(project_id),
    )


class RequestStore:
    """Owns ``connection_requests`` rows; every write is a single guarded statement."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, request_id: RequestId) -> ConnectionRequest | None:
        stmt = _with_parties(select(ConnectionRequest).where(ConnectionRequest.id == request_id))
        return self._db.scalars(stmt).first()

    def exists_for(self, requester_id: UserId, recipient_id: UserId, project_id: ProjectId | None) -> bool:
        return self._db.scalar(_tuple_lookup(requester_id, recipient_id, project_id)) is not None

    def insert(
        self,
        *,
        requester_id: UserId,
        recipient_id: UserId,
        project_id: ProjectId | None,
        message: str,
    ) -> ConnectionRequest:
        """Insert a pending request; the unique indexes are the authoritative duplicate guard."""

        record = ConnectionRequest(
            requester_id=requester_id,
            recipient_id=recipient_id,
            project_id=project_id,
            message=message,
            status=RequestStatus.PENDING.value,
            created_at=datetime.now(timezone.utc),
        )
        try:
            self._db.add(record)
            self._db.commit()
        except IntegrityError as exc:
            self._db.rollback()
            if self._db.scalar(_tuple_lookup(requester_id, recipient_id, project_id)) is not None:
                logger.info("Duplicate collaboration request %s -> %s (scope=%s)", requester_id, recipient_id, project_id)
                raise DuplicateRequest() from exc
            logger.exception("Integrity failure while storing collaboration request")
            raise ServerError("Server error while sending collaboration request") from exc
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("Failed to store collaboration request")
            raise ServerError("Server error while sending collaboration request") from exc

        stored = self.get(RequestId(record.id))
        if stored is None:  # pragma: no cover - row vanished between commit and reload
            raise ServerError("Server error while sending collaboration request")
        return stored

    def latest_between(self, first: UserId, second: UserId) -> ConnectionRequest | None:
        stmt = _with_parties(
            select(ConnectionRequest)
            .where(
                or_(
                    and_(ConnectionRequest.requester_id == first, ConnectionRequest.recipient_id == second),
                    and_(ConnectionRequest.requester_id == second, ConnectionRequest.recipient_id == first),
                )
            )
            .order_by(ConnectionRequest.created_at.desc())
            .limit(1)
        )
        return self._db.scalars(stmt).first()

    def list_for(self, user_id: UserId, direction: str) -> list[ConnectionRequest]:
        if direction == "sent":
            criteria = ConnectionRequest.requester_id == user_id
        elif direction == "received":
            criteria = ConnectionRequest.recipient_id == user_id
        else:
            criteria = or_(ConnectionRequest.requester_id == user_id, ConnectionRequest.recipient_id == user_id)
        stmt = _with_parties(select(ConnectionRequest).where(criteria).order_by(ConnectionRequest.created_at.desc()))
        return list(self._db.scalars(stmt))

    def list_accepted_for(self, user_id: UserId) -> list[ConnectionRequest]:
        stmt = _with_parties(
            select(ConnectionRequest)
            .where(
                ConnectionRequest.status == RequestStatus.ACCEPTED.value,
                or_(ConnectionRequest.requester_id == user_id, ConnectionRequest.recipient_id == user_id),
            )
            .order_by(ConnectionRequest.created_at.desc())
        )
        return list(self._db.scalars(stmt))

    def transition(
        self,
        request_id: RequestId,
        *,
        expected: RequestStatus,
        target: RequestStatus,
        response_message: str | None,
    ) -> bool:
        """Compare-and-swap the status; ``False`` means another writer got there first."""

        stmt = (
            update(ConnectionRequest)
            .where(ConnectionRequest.id == request_id, ConnectionRequest.status == expected.value)
            .values(
                status=target.value,
                response_message=response_message,
                responded_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        try:
            changed = self._db.execute(stmt).rowcount
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("Failed to update collaboration request %s", request_id)
            raise ServerError("Server error while responding to collaboration request") from exc
        return changed == 1

    def delete(self, request_id: RequestId) -> bool:
        stmt = delete(ConnectionRequest).where(ConnectionRequest.id == request_id).execution_options(
            synchronize_session=False
        )
        try:
            changed = self._db.execute(stmt).rowcount
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("Failed to delete collaboration request %s", request_id)
            raise ServerError("Server error while cancelling collaboration request") from exc
        return changed == 1


__all__ = ["RequestStore"]
