"""Adapters over the user and project tables consumed by the request workflow."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..identifiers import ProjectId, UserId
from ..models import Project, User, project_collaborators
from ..schemas import UserSummary

logger = logging.getLogger(__name__)


class ProjectMembershipError(RuntimeError):
    """Raised when a collaborator could not be recorded on a project."""


class UserDirectory:
    """Read-only lookups over registered users."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def exists(self, user_id: UserId) -> bool:
        return self._db.scalar(select(User.id).where(User.id == user_id)) is not None

    def get(self, user_id: UserId) -> User | None:
        return self._db.get(User, user_id)

    def identity_summary(self, user_id: UserId) -> UserSummary | None:
        user = self.get(user_id)
        if user is None:
            return None
        return UserSummary.model_validate(user)


class ProjectStore:
    """Project existence checks plus the idempotent collaborator mutation."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def exists(self, project_id: ProjectId) -> bool:
        return self._db.scalar(select(Project.id).where(Project.id == project_id)) is not None

    def is_collaborator(self, project_id: ProjectId, user_id: UserId) -> bool:
        stmt = select(project_collaborators.c.user_id).where(
            project_collaborators.c.project_id == project_id,
            project_collaborators.c.user_id == user_id,
        )
        return self._db.scalar(stmt) is not None

    def collaborator_ids(self, project_id: ProjectId) -> list[UUID]:
        stmt = select(project_collaborators.c.user_id).where(project_collaborators.c.project_id == project_id)
        return list(self._db.scalars(stmt))

    def add_collaborator(self, project_id: ProjectId, user_id: UserId) -> bool:
        """Add ``user_id`` to the project; returns ``False`` when already a member."""

        if not self.exists(project_id):
            raise ProjectMembershipError(f"Project {project_id} no longer exists")
        if self.is_collaborator(project_id, user_id):
            return False

        try:
            self._db.execute(insert(project_collaborators).values(project_id=project_id, user_id=user_id))
            self._db.commit()
        except IntegrityError:
            # A concurrent delivery inserted the same membership first.
            self._db.rollback()
            if self.is_collaborator(project_id, user_id):
                return False
            raise ProjectMembershipError(f"Unable to add {user_id} to project {project_id}")
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise ProjectMembershipError(f"Unable to add {user_id} to project {project_id}") from exc

        logger.info("Added collaborator %s to project %s", user_id, project_id)
        return True


__all__ = ["ProjectMembershipError", "ProjectStore", "UserDirectory"]
