"""Shared fixtures for collaboration request tests."""
from __future__ import annotations

import os
from typing import Callable, Iterator

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_collaborations.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("MEMBERSHIP_RETRY_DELAY_SECONDS", "0")

import pytest  # noqa: E402
from sqlalchemy import delete  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from scholarlink.database import Base, SessionLocal, engine  # noqa: E402
from scholarlink.models import ConnectionRequest, Project, User, project_collaborators  # noqa: E402
from scholarlink.services import ConnectionService, MembershipDispatcher  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        session.execute(delete(project_collaborators))
        session.execute(delete(ConnectionRequest))
        session.execute(delete(Project))
        session.execute(delete(User))
        session.commit()
    yield


@pytest.fixture
def db() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_factory() -> Callable[..., User]:
    def _factory(name: str, *, university: str | None = "Makerere University") -> User:
        with SessionLocal() as session:
            user = User(
                name=name,
                email=f"{name.lower().replace(' ', '.')}@university.edu",
                hashed_password="test-hash",
                university=university,
            )
            session.add(user)
            session.commit()
            session.refresh(user)
            return user
    return _factory


@pytest.fixture
def project_factory() -> Callable[..., Project]:
    def _factory(title: str, *, creator: User) -> Project:
        with SessionLocal() as session:
            project = Project(title=title, description=f"{title} research", creator_id=creator.id)
            session.add(project)
            session.commit()
            session.refresh(project)
            return project
    return _factory


@pytest.fixture
def inline_dispatcher() -> MembershipDispatcher:
    return MembershipDispatcher(SessionLocal, retry_delay=0, inline=True)


@pytest.fixture
def service(db: Session, inline_dispatcher: MembershipDispatcher) -> ConnectionService:
    return ConnectionService(db, dispatcher=inline_dispatcher)
