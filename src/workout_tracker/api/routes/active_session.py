"""
Active workout session routes.

Each user has at most one active session. Mutations carry the version the
client last saw; a stale version is answered with 409.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..deps import get_current_user_id, get_session_service
from ...models.sessions import (
    ActiveSessionResponse,
    ActiveSessionUpdatePayload,
    CompleteSessionRequest,
    CompletionResult,
    RecoverSessionRequest,
    StartSessionRequest,
)
from ...services.session_service import SessionService


router = APIRouter()


@router.get("", response_model=ActiveSessionResponse)
async def get_active_session(
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.get_active_session_state(user_id)


@router.post("", response_model=ActiveSessionResponse, status_code=201)
async def start_session(
    request: StartSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    """Start a session. Fails with 409 if one is active unless ``replace`` is set."""
    return service.start_session(user_id, request)


@router.patch("", response_model=ActiveSessionResponse)
async def update_active_session(
    payload: ActiveSessionUpdatePayload,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.update_active_session(user_id, payload)


@router.post("/timer/toggle", response_model=ActiveSessionResponse)
async def toggle_timer(
    version: Optional[int] = Query(None, ge=1),
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.toggle_timer(user_id, version)


@router.post("/pause", response_model=ActiveSessionResponse)
async def pause_session(
    version: Optional[int] = Query(None, ge=1),
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.pause_session(user_id, version)


@router.post("/resume", response_model=ActiveSessionResponse)
async def resume_session(
    version: Optional[int] = Query(None, ge=1),
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.resume_session(user_id, version)


@router.post("/recover", response_model=ActiveSessionResponse)
async def recover_session(
    request: RecoverSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    return service.recover_session(user_id, request)


@router.post("/complete", response_model=CompletionResult)
async def complete_session(
    request: CompleteSessionRequest,
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    """Complete the active session and return new records and achievements."""
    return service.complete_active_session(user_id, request)


@router.delete("", status_code=204)
async def end_session(
    user_id: str = Depends(get_current_user_id),
    service: SessionService = Depends(get_session_service),
):
    """Abandon the active session without recording anything."""
    service.end_session(user_id)
    return Response(status_code=204)
