"""Out-of-band propagation of accepted project requests into project membership."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import create_session
from ..identifiers import ProjectId, RequestId, UserId
from .directory import ProjectStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MembershipJob:
    request_id: RequestId
    project_id: ProjectId
    user_id: UserId


class MembershipDispatcher:
    """Adds accepted recipients to project collaborators without blocking the caller.

    Jobs are idempotent: delivering the same job twice leaves a single membership row.
    Failures are retried, then logged; they never surface to the accepting caller.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = create_session,
        *,
        attempts: int | None = None,
        retry_delay: float | None = None,
        inline: bool = False,
        project_store_factory: Callable[[Session], ProjectStore] = ProjectStore,
    ) -> None:
        settings = get_settings()
        self._session_factory = session_factory
        self._attempts = max(1, attempts if attempts is not None else settings.membership_retry_attempts)
        self._retry_delay = max(0.0, retry_delay if retry_delay is not None else settings.membership_retry_delay_seconds)
        self._inline = inline
        self._project_store_factory = project_store_factory
        self._tasks: set[asyncio.Task[bool]] = set()

    def dispatch(self, job: MembershipJob) -> asyncio.Task[bool] | None:
        """Schedule ``job`` on the running loop, or run it immediately when there is none."""

        if self._inline:
            self.run(job)
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.run(job)
            return None
        task = loop.create_task(asyncio.to_thread(self.run, job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def run(self, job: MembershipJob) -> bool:
        for attempt in range(1, self._attempts + 1):
            session: Session | None = None
            try:
                session = self._session_factory()
                added = self._project_store_factory(session).add_collaborator(job.project_id, job.user_id)
            except Exception:
                logger.warning(
                    "Membership update failed for request %s (attempt %d/%d)",
                    job.request_id,
                    attempt,
                    self._attempts,
                    exc_info=True,
                )
            else:
                if not added:
                    logger.info("User %s already collaborates on project %s", job.user_id, job.project_id)
                return True
            finally:
                if session is not None:
                    session.close()
            if attempt < self._attempts and self._retry_delay:
                time.sleep(self._retry_delay * attempt)

        logger.error(
            "Giving up adding %s to project %s for request %s",
            job.user_id,
            job.project_id,
            job.request_id,
        )
        return False

    async def drain(self) -> None:
        """Wait for scheduled jobs; used during shutdown."""

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


_default_dispatcher: MembershipDispatcher | None = None


def get_membership_dispatcher() -> MembershipDispatcher:
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = MembershipDispatcher()
    return _default_dispatcher


__all__ = ["MembershipDispatcher", "MembershipJob", "get_membership_dispatcher"]
