"""
Scheduled and completed workout session routes.

Provides endpoints for:
- Scheduling sessions against a template
- Logging a session that was performed outside the active-session flow
- Completing a scheduled session
- Listing and reading sessions by status
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from ..deps import get_current_user_id, get_session_service
from ...models.sessions import (
    CompletionResult,
    LogSessionRequest,
    ScheduleSessionRequest,
    SessionStatus,
    WorkoutSessionRecord,
)
from ...services.session_service import SessionService


router = APIRouter()


@router.post("/scheduled", response_model=WorkoutSessionRecord, status_code=201)
async def schedule_session(
    request: ScheduleSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.create_scheduled_session(user_id, request)


@router.get("", response_model=List[WorkoutSessionRecord])
async def list_sessions(
    status: SessionStatus = Query(SessionStatus.COMPLETED),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    """List sessions. Scheduled sessions come soonest first, others most recent first."""
    return service.list_sessions(user_id, status, limit=limit, offset=offset)


@router.post("/log", response_model=CompletionResult, status_code=201)
async def log_session(
    request: LogSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.log_session(user_id, request)


@router.get("/{session_id}", response_model=WorkoutSessionRecord)
async def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.get_session(user_id, session_id)


@router.post("/{session_id}/complete", response_model=CompletionResult)
async def complete_scheduled_session(
    session_id: str,
    request: LogSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.complete_scheduled_session(user_id, session_id, request)
