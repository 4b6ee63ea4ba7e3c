"""
Workout template API routes.

Provides endpoints for:
- Creating templates from full documents or compact exercise lists
- Listing, reading, replacing and deleting the caller's templates
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response

from ..deps import get_current_user_id, get_template_service
from ...models.templates import (
    TemplateBuildRequest,
    WorkoutTemplateData,
    WorkoutTemplateRecord,
)
from ...services.template_service import TemplateService


router = APIRouter()


@router.post("", response_model=WorkoutTemplateRecord, status_code=201)
async def create_template(
    template: WorkoutTemplateData,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    """Create a template. Volume and estimated duration are derived server-side."""
    return service.create_template(user_id, template)


@router.post("/build", response_model=WorkoutTemplateRecord, status_code=201)
async def build_template(
    request: TemplateBuildRequest,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    """Create a template from exercise keys and target sets."""
    return service.build_template(user_id, request)


@router.get("", response_model=List[WorkoutTemplateRecord])
async def list_templates(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    return service.list_templates(user_id, limit=limit, offset=offset)


@router.get("/{template_id}", response_model=WorkoutTemplateRecord)
async def get_template(
    template_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    return service.get_template(user_id, template_id)


@router.put("/{template_id}", response_model=WorkoutTemplateRecord)
async def update_template(
    template_id: str,
    template: WorkoutTemplateData,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    """Replace a template. Sessions created from it keep their own snapshot."""
    return service.update_template(user_id, template_id, template)


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TemplateService = Depends(get_template_service),
):
    service.delete_template(user_id, template_id)
    return Response(status_code=204)
