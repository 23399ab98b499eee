"""Concurrency guarantees: the storage layer, not the pre-checks, decides races."""
from __future__ import annotations

import threading
from typing import cast
from uuid import UUID

import pytest

from scholarlink.database import SessionLocal
from scholarlink.identifiers import ProjectId, RequestId, UserId
from scholarlink.models import RequestStatus
from scholarlink.services import (
    AlreadyResolved,
    CallerIdentity,
    ConnectionService,
    DuplicateRequest,
    MembershipDispatcher,
    MembershipJob,
    ProjectStore,
)
from scholarlink.services.connection_store import RequestStore


class BlindStore(RequestStore):
    """Skips the advisory duplicate check so only the unique index can object."""

    def exists_for(self, requester_id, recipient_id, project_id) -> bool:
        return False


class RendezvousStore(RequestStore):
    """Holds every responder at the write until all of them passed the pending check."""

    def __init__(self, db, barrier: threading.Barrier, write_lock: threading.Lock) -> None:
        super().__init__(db)
        self._barrier = barrier
        self._write_lock = write_lock

    def transition(self, request_id, *, expected, target, response_message) -> bool:
        self._barrier.wait(timeout=10)
        with self._write_lock:
            return super().transition(
                request_id,
                expected=expected,
                target=target,
                response_message=response_message,
            )


class RecordingDispatcher(MembershipDispatcher):
    def __init__(self) -> None:
        super().__init__(SessionLocal, retry_delay=0, inline=True)
        self.jobs: list[MembershipJob] = []

    def dispatch(self, job: MembershipJob):
        self.jobs.append(job)
        return None


def _uid(user) -> UserId:
    return UserId(cast(UUID, user.id))


@pytest.mark.parametrize("scoped", [False, True])
def test_unique_index_rejects_duplicate_when_precheck_is_bypassed(db, user_factory, project_factory, inline_dispatcher, scoped):
    ada = user_factory("Ada")
    grace = user_factory("Grace")
    project_id = ProjectId(project_factory("P123", creator=ada).id) if scoped else None
    service = ConnectionService(db, store=BlindStore(db), dispatcher=inline_dispatcher)
    caller = CallerIdentity.from_user(ada)

    service.create_request(caller, _uid(grace), project_id=project_id)
    with pytest.raises(DuplicateRequest):
        service.create_request(caller, _uid(grace), project_id=project_id)

    assert len(RequestStore(db).list_for(caller.id, "sent")) == 1


def test_concurrent_responses_commit_exactly_one(user_factory, project_factory, inline_dispatcher):
    ada = user_factory("Ada")
    grace = user_factory("Grace")
    project = project_factory("P123", creator=ada)
    project_id = ProjectId(project.id)

    with SessionLocal() as session:
        created = ConnectionService(session, dispatcher=inline_dispatcher).create_request(
            CallerIdentity.from_user(ada), _uid(grace), project_id=project_id
        )
    request_id = RequestId(created.id)

    barrier = threading.Barrier(2)
    write_lock = threading.Lock()
    dispatcher = RecordingDispatcher()
    outcomes: dict[str, object] = {}

    def _respond(decision: str) -> None:
        with SessionLocal() as session:
            service = ConnectionService(
                session,
                store=RendezvousStore(session, barrier, write_lock),
                dispatcher=dispatcher,
            )
            try:
                outcomes[decision] = service.respond(CallerIdentity.from_user(grace), request_id, decision).status
            except AlreadyResolved as exc:
                outcomes[decision] = exc

    threads = [threading.Thread(target=_respond, args=(decision,)) for decision in ("accepted", "declined")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    winners = [value for value in outcomes.values() if isinstance(value, str)]
    losers = [value for value in outcomes.values() if isinstance(value, AlreadyResolved)]
    assert len(winners) == 1
    assert len(losers) == 1

    with SessionLocal() as session:
        stored = RequestStore(session).get(request_id)
        assert stored is not None
        assert stored.status == winners[0]

    if winners[0] == RequestStatus.ACCEPTED:
        assert [job.user_id for job in dispatcher.jobs] == [grace.id]
        # Redelivering the job must still leave a single membership row.
        for job in dispatcher.jobs * 2:
            assert inline_dispatcher.run(job) is True
        with SessionLocal() as session:
            assert ProjectStore(session).collaborator_ids(project_id) == [grace.id]
    else:
        assert dispatcher.jobs == []
