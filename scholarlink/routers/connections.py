"""Collaboration request API routes."""
from __future__ import annotations

from typing import NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..identifiers import ProjectId, RequestId, UserId
from ..schemas import (
    ConnectionActionResponse,
    ConnectionCancelResponse,
    ConnectionRequestCreate,
    ConnectionRequestListResponse,
    ConnectionRespondPayload,
    ConnectionStatusResponse,
    MenteeListResponse,
    RequestDirection,
)
from ..services import (
    CallerIdentity,
    ConnectionService,
    ConnectionServiceError,
    MembershipDispatcher,
    get_current_caller,
    get_membership_dispatcher,
)

router = APIRouter(prefix="/collaborations", tags=["collaborations"])


def get_connection_service(
    db: Session = Depends(get_session),
    dispatcher: MembershipDispatcher = Depends(get_membership_dispatcher),
) -> ConnectionService:
    return ConnectionService(db, dispatcher=dispatcher)


def _raise_http(exc: ConnectionServiceError) -> NoReturn:
    raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.post("/request", response_model=ConnectionActionResponse, status_code=status.HTTP_201_CREATED)
async def send_collaboration_request(
    payload: ConnectionRequestCreate,
    caller: CallerIdentity = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> ConnectionActionResponse:
    try:
        request = service.create_request(
            caller,
            UserId(payload.recipient_id),
            message=payload.message,
            project_id=ProjectId(payload.project_id) if payload.project_id else None,
        )
    except ConnectionServiceError as exc:
        _raise_http(exc)
    return ConnectionActionResponse(message="Collaboration request sent successfully", data=request)


@router.get("/status/{user_id}", response_model=ConnectionStatusResponse)
async def collaboration_status(
    user_id: UUID,
    caller: CallerIdentity = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> ConnectionStatusResponse:
    try:
        return service.get_status(caller, UserId(user_id))
    except ConnectionServiceError as exc:
        _raise_http(exc)


@router.get("/requests", response_model=ConnectionRequestListResponse)
async def list_collaboration_requests(
    direction: RequestDirection = Query("all", alias="type"),
    caller: CallerIdentity = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> ConnectionRequestListResponse:
    try:
        items = service.list_requests(caller, direction)
    except ConnectionServiceError as exc:
        _raise_http(exc)
    return ConnectionRequestListResponse(count=len(items), data=items)


@router.get("/mentees", response_model=MenteeListResponse)
async def list_mentees(
    caller: CallerIdentity = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> MenteeListResponse:
    try:
        items = service.list_mentees(caller)
    except ConnectionServiceError as exc:
        _raise_http(exc)
    return MenteeListResponse(count=len(items), data=items)


@router.put("/respond/{request_id}", response_model=ConnectionActionResponse)
async def respond_to_collaboration_request(
    request_id: UUID,
    payload: ConnectionRespondPayload,
    caller: CallerIdentity = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> ConnectionActionResponse:
    try:
        request = service.respond(caller, RequestId(request_id), payload.decision, payload.response_message)
    except ConnectionServiceError as exc:
        _raise_http(exc)
    return ConnectionActionResponse(message=f"Collaboration request {request.status}", data=request)


@router.delete("/cancel/{request_id}", response_model=ConnectionCancelResponse)
async def cancel_collaboration_request(
    request_id: UUID,
    caller: CallerIdentity = Depends(get_current_caller),
    service: ConnectionService = Depends(get_connection_service),
) -> ConnectionCancelResponse:
    try:
        removed = service.cancel(caller, RequestId(request_id))
    except ConnectionServiceError as exc:
        _raise_http(exc)
    return ConnectionCancelResponse(message="Collaboration request cancelled successfully", request_id=removed)


__all__ = ["get_connection_service", "router"]
