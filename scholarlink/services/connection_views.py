"""Caller-relative projections over stored collaboration requests."""
from __future__ import annotations

from typing import Callable, Iterable

from ..identifiers import UserId
from ..models import ConnectionRequest, RequestStatus
from ..schemas import ConnectionRequestResponse, MenteeEntry, ProjectSummary, StatusLabel, UserSummary

Summarizer = Callable[[UserId], UserSummary | None]


def resolve_status_label(request: ConnectionRequest | None, viewer_id: UserId) -> StatusLabel:
    if request is None:
        return "none"
    if request.status == RequestStatus.PENDING:
        return "sent" if request.requester_id == viewer_id else "pending"
    return request.status


def build_request_view(request: ConnectionRequest, summarize: Summarizer | None = None) -> ConnectionRequestResponse:
    """Shape ``request`` for display; ``summarize`` supplies the party summaries when given."""

    view = ConnectionRequestResponse.model_validate(request)
    if summarize is None:
        return view
    return view.model_copy(
        update={
            "requester": summarize(UserId(request.requester_id)),
            "recipient": summarize(UserId(request.recipient_id)),
        }
    )


def build_mentee_view(
    requests: Iterable[ConnectionRequest],
    viewer_id: UserId,
    summarize: Summarizer | None = None,
) -> list[MenteeEntry]:
    """Map accepted requests naming ``viewer_id`` to the counterpart on the other side."""

    entries: list[MenteeEntry] = []
    for request in requests:
        if request.status != RequestStatus.ACCEPTED or not request.involves(viewer_id):
            continue
        if summarize is not None:
            mentee = summarize(UserId(request.counterpart_of(viewer_id)))
        else:
            counterpart = request.recipient if request.requester_id == viewer_id else request.requester
            mentee = UserSummary.model_validate(counterpart)
        if mentee is None:
            continue
        entries.append(
            MenteeEntry(
                request_id=request.id,
                mentee=mentee,
                project=ProjectSummary.model_validate(request.project) if request.project is not None else None,
                created_at=request.created_at,
            )
        )
    return entries


__all__ = ["Summarizer", "build_mentee_view", "build_request_view", "resolve_status_label"]
