"""Workout template management.

Templates are validated on every write. Derived values (volume, estimated
duration) are recomputed on save and are never taken from the client.
"""

import logging
import uuid
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from ..db.repositories.template_repository import TemplateRepository
from ..exceptions import TemplateNotFoundError, TemplateValidationError
from ..models.base import format_validation_errors
from ..metrics.template import (
    calculate_estimated_duration,
    calculate_template_volume,
    create_workout_template,
)
from ..models.templates import (
    TemplateBuildRequest,
    WorkoutTemplateData,
    WorkoutTemplateRecord,
)

logger = logging.getLogger(__name__)


def parse_template(data: Any) -> WorkoutTemplateData:
    """Validate raw template data, raising the domain validation error."""
    if isinstance(data, WorkoutTemplateData):
        return data
    try:
        return WorkoutTemplateData.model_validate(data)
    except PydanticValidationError as e:
        raise TemplateValidationError(
            "Invalid workout template",
            details={"errors": format_validation_errors(e)},
        ) from e


class TemplateService:
    """Service for creating and managing a user's workout templates."""

    def __init__(
        self,
        template_repository: TemplateRepository,
        default_rest_seconds: int = 60,
        warmup_buffer_minutes: int = 5,
    ):
        self.template_repository = template_repository
        self.default_rest_seconds = default_rest_seconds
        self.warmup_buffer_minutes = warmup_buffer_minutes

    def _with_derived_values(self, template: WorkoutTemplateData) -> WorkoutTemplateData:
        metadata = template.metadata.model_copy(update={
            "estimated_duration": calculate_estimated_duration(
                template.exercises, self.warmup_buffer_minutes
            ),
        })
        return template.model_copy(update={"metadata": metadata})

    def create_template(self, user_id: str, data: Any) -> WorkoutTemplateRecord:
        template = self._with_derived_values(parse_template(data))
        record = WorkoutTemplateRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=template.metadata.name,
            template_data=template,
            total_volume=calculate_template_volume(template.exercises),
            estimated_duration=template.metadata.estimated_duration,
        )
        saved = self.template_repository.save(record)
        logger.info(f"Created template {saved.id} for user {user_id}")
        return saved

    def build_template(self, user_id: str, request: TemplateBuildRequest) -> WorkoutTemplateRecord:
        """Create a template from compact exercise descriptions."""
        exercises: List[Dict[str, Any]] = [
            exercise.model_dump(exclude_none=True) for exercise in request.exercises
        ]
        template = create_workout_template(
            request.name,
            exercises,
            description=request.description,
            tags=request.tags,
            workout_type=request.workout_type,
            difficulty=request.difficulty,
            rest_seconds=self.default_rest_seconds,
            warmup_buffer_minutes=self.warmup_buffer_minutes,
        )
        return self.create_template(user_id, template)

    def get_template(self, user_id: str, template_id: str) -> WorkoutTemplateRecord:
        template = self.template_repository.get_for_user(template_id, user_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def list_templates(self, user_id: str, limit: int = 50, offset: int = 0) -> List[WorkoutTemplateRecord]:
        return self.template_repository.get_all(limit=limit, offset=offset, user_id=user_id)

    def update_template(self, user_id: str, template_id: str, data: Any) -> WorkoutTemplateRecord:
        """Replace a template's document. Sessions keep the snapshot they captured."""
        existing = self.get_template(user_id, template_id)
        template = self._with_derived_values(parse_template(data))
        record = existing.model_copy(update={
            "name": template.metadata.name,
            "template_data": template,
            "total_volume": calculate_template_volume(template.exercises),
            "estimated_duration": template.metadata.estimated_duration,
        })
        return self.template_repository.save(record)

    def delete_template(self, user_id: str, template_id: str) -> None:
        self.get_template(user_id, template_id)
        self.template_repository.delete(template_id)
        logger.info(f"Deleted template {template_id} for user {user_id}")
