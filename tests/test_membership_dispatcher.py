"""Tests for the post-acceptance project membership side effect."""
from __future__ import annotations

import asyncio
import uuid
from typing import cast
from uuid import UUID

from scholarlink.database import SessionLocal
from scholarlink.identifiers import ProjectId, RequestId, UserId
from scholarlink.services import (
    CallerIdentity,
    ConnectionService,
    MembershipDispatcher,
    MembershipJob,
    ProjectMembershipError,
    ProjectStore,
)
from scholarlink.services.connection_store import RequestStore


class FailingProjectStore(ProjectStore):
    calls = 0

    def add_collaborator(self, project_id, user_id) -> bool:
        type(self).calls += 1
        raise ProjectMembershipError("project service unavailable")


class FlakyProjectStore(ProjectStore):
    calls = 0

    def add_collaborator(self, project_id, user_id) -> bool:
        type(self).calls += 1
        if type(self).calls == 1:
            raise ProjectMembershipError("transient failure")
        return super().add_collaborator(project_id, user_id)


class UnreachableProjectStore(ProjectStore):
    calls = 0

    def add_collaborator(self, project_id, user_id) -> bool:
        type(self).calls += 1
        raise ConnectionError("project service unreachable")


class BrokenDispatcher(MembershipDispatcher):
    def dispatch(self, job: MembershipJob):
        raise RuntimeError("scheduler unavailable")


def _job(project, user) -> MembershipJob:
    return MembershipJob(
        request_id=RequestId(uuid.uuid4()),
        project_id=ProjectId(cast(UUID, project.id)),
        user_id=UserId(cast(UUID, user.id)),
    )


def test_repeated_delivery_adds_member_once(db, user_factory, project_factory, inline_dispatcher):
    owner = user_factory("Owner")
    member = user_factory("Member")
    project = project_factory("Genomes", creator=owner)
    job = _job(project, member)

    assert inline_dispatcher.run(job) is True
    assert inline_dispatcher.run(job) is True

    assert ProjectStore(db).collaborator_ids(job.project_id) == [member.id]


def test_add_collaborator_reports_whether_it_changed_anything(db, user_factory, project_factory):
    owner = user_factory("Owner")
    member = user_factory("Member")
    project = project_factory("Genomes", creator=owner)
    store = ProjectStore(db)

    assert store.add_collaborator(ProjectId(project.id), UserId(member.id)) is True
    assert store.add_collaborator(ProjectId(project.id), UserId(member.id)) is False


def test_failures_are_retried_then_suppressed(user_factory, project_factory):
    owner = user_factory("Owner")
    member = user_factory("Member")
    project = project_factory("Genomes", creator=owner)
    FailingProjectStore.calls = 0
    dispatcher = MembershipDispatcher(
        SessionLocal,
        attempts=3,
        retry_delay=0,
        inline=True,
        project_store_factory=FailingProjectStore,
    )

    assert dispatcher.run(_job(project, member)) is False
    assert FailingProjectStore.calls == 3


def test_transient_failure_recovers_on_retry(db, user_factory, project_factory):
    owner = user_factory("Owner")
    member = user_factory("Member")
    project = project_factory("Genomes", creator=owner)
    FlakyProjectStore.calls = 0
    dispatcher = MembershipDispatcher(
        SessionLocal,
        attempts=2,
        retry_delay=0,
        inline=True,
        project_store_factory=FlakyProjectStore,
    )

    assert dispatcher.run(_job(project, member)) is True
    assert FlakyProjectStore.calls == 2
    assert ProjectStore(db).is_collaborator(ProjectId(project.id), UserId(member.id))


def test_missing_project_is_logged_not_raised(user_factory):
    member = user_factory("Member")
    dispatcher = MembershipDispatcher(SessionLocal, attempts=1, retry_delay=0, inline=True)
    job = MembershipJob(
        request_id=RequestId(uuid.uuid4()),
        project_id=ProjectId(uuid.uuid4()),
        user_id=UserId(member.id),
    )

    assert dispatcher.run(job) is False


def test_acceptance_survives_membership_failure(db, user_factory, project_factory):
    ada = user_factory("Ada")
    grace = user_factory("Grace")
    project = project_factory("P123", creator=ada)
    dispatcher = MembershipDispatcher(
        SessionLocal,
        attempts=2,
        retry_delay=0,
        inline=True,
        project_store_factory=FailingProjectStore,
    )
    service = ConnectionService(db, dispatcher=dispatcher)
    created = service.create_request(CallerIdentity.from_user(ada), UserId(grace.id), project_id=ProjectId(project.id))

    responded = service.respond(CallerIdentity.from_user(grace), RequestId(created.id), "accepted")

    assert responded.status == "accepted"
    stored = RequestStore(db).get(RequestId(created.id))
    assert stored is not None and stored.status == "accepted"
    assert ProjectStore(db).collaborator_ids(ProjectId(project.id)) == []


def test_dispatch_runs_as_task_when_loop_is_running(db, user_factory, project_factory):
    owner = user_factory("Owner")
    member = user_factory("Member")
    project = project_factory("Genomes", creator=owner)
    dispatcher = MembershipDispatcher(SessionLocal, retry_delay=0)
    job = _job(project, member)

    async def _scenario() -> bool:
        task = dispatcher.dispatch(job)
        assert task is not None
        await dispatcher.drain()
        return task.result()

    assert asyncio.run(_scenario()) is True
    assert ProjectStore(db).collaborator_ids(job.project_id) == [member.id]


def test_dispatch_without_loop_runs_immediately(db, user_factory, project_factory):
    owner = user_factory("Owner")
    member = user_factory("Member")
    project = project_factory("Genomes", creator=owner)
    dispatcher = MembershipDispatcher(SessionLocal, retry_delay=0)

    assert dispatcher.dispatch(_job(project, member)) is None
    assert ProjectStore(db).is_collaborator(ProjectId(project.id), UserId(member.id))


def test_unexpected_adapter_error_is_retried_and_kept_from_the_caller(db, user_factory, project_factory):
    ada = user_factory("Ada")
    grace = user_factory("Grace")
    project = project_factory("P123", creator=ada)
    UnreachableProjectStore.calls = 0
    dispatcher = MembershipDispatcher(
        SessionLocal,
        attempts=2,
        retry_delay=0,
        inline=True,
        project_store_factory=UnreachableProjectStore,
    )
    service = ConnectionService(db, dispatcher=dispatcher)
    created = service.create_request(CallerIdentity.from_user(ada), UserId(grace.id), project_id=ProjectId(project.id))

    responded = service.respond(CallerIdentity.from_user(grace), RequestId(created.id), "accepted")

    assert responded.status == "accepted"
    assert UnreachableProjectStore.calls == 2
    stored = RequestStore(db).get(RequestId(created.id))
    assert stored is not None and stored.status == "accepted"


def test_session_factory_failure_is_suppressed(user_factory, project_factory):
    owner = user_factory("Owner")
    member = user_factory("Member")
    project = project_factory("Genomes", creator=owner)
    attempts: list[int] = []

    def _no_session():
        attempts.append(1)
        raise OSError("database unreachable")

    dispatcher = MembershipDispatcher(_no_session, attempts=3, retry_delay=0, inline=True)

    assert dispatcher.run(_job(project, member)) is False
    assert len(attempts) == 3


def test_unexpected_error_inside_task_is_reported_as_failure(user_factory, project_factory):
    owner = user_factory("Owner")
    member = user_factory("Member")
    project = project_factory("Genomes", creator=owner)
    UnreachableProjectStore.calls = 0
    dispatcher = MembershipDispatcher(
        SessionLocal,
        attempts=2,
        retry_delay=0,
        project_store_factory=UnreachableProjectStore,
    )

    async def _scenario() -> bool:
        task = dispatcher.dispatch(_job(project, member))
        assert task is not None
        await dispatcher.drain()
        return task.result()

    assert asyncio.run(_scenario()) is False
    assert UnreachableProjectStore.calls == 2


def test_dispatch_failure_does_not_undo_acceptance(db, user_factory, project_factory):
    ada = user_factory("Ada")
    grace = user_factory("Grace")
    project = project_factory("P123", creator=ada)
    service = ConnectionService(db, dispatcher=BrokenDispatcher(SessionLocal, retry_delay=0))
    created = service.create_request(CallerIdentity.from_user(ada), UserId(grace.id), project_id=ProjectId(project.id))

    responded = service.respond(CallerIdentity.from_user(grace), RequestId(created.id), "accepted")

    assert responded.status == "accepted"
    stored = RequestStore(db).get(RequestId(created.id))
    assert stored is not None and stored.status == "accepted"
