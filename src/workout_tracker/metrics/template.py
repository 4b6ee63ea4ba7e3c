"""Template-level derived values and the template builder."""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from ..catalog import resolve_exercise
from ..exceptions import TemplateValidationError
from ..models.base import format_validation_errors
from ..models.templates import (
    Difficulty,
    SetType,
    TemplateMetadata,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplateData,
    WorkoutType,
)
from .session import round_half_up


DEFAULT_REST_SECONDS = 60
WARMUP_BUFFER_MINUTES = 5
MINUTES_PER_SET = 0.5


def calculate_template_volume(exercises: Iterable[WorkoutExercise]) -> float:
    """
    Planned volume of a template.

    Strength sets count reps x weight. Cardio sets fall back to target
    calories, then to distance x duration normalized per minute.
    """
    total = 0.0
    for exercise in exercises:
        for target in exercise.sets:
            if target.target_reps and target.target_weight:
                total += target.target_reps * target.target_weight
            elif target.target_calories:
                total += target.target_calories
            elif target.target_distance and target.target_duration:
                total += target.target_distance * target.target_duration / 60
    return total


def calculate_estimated_duration(
    exercises: Iterable[WorkoutExercise],
    warmup_buffer_minutes: int = WARMUP_BUFFER_MINUTES,
) -> int:
    """Estimated duration in minutes: working time plus rest plus a warmup buffer."""
    total_minutes = 0.0
    for exercise in exercises:
        set_count = len(exercise.sets)
        rest_seconds = exercise.rest_between_sets or DEFAULT_REST_SECONDS
        total_minutes += set_count * MINUTES_PER_SET
        total_minutes += (set_count - 1) * rest_seconds / 60
    return round_half_up(total_minutes + warmup_buffer_minutes)


def _unique(values: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


def extract_muscle_groups(exercises: Iterable[WorkoutExercise]) -> List[str]:
    """Unique muscles across exercises, in first-seen order."""
    return _unique(muscle for exercise in exercises for muscle in exercise.muscles)


def extract_equipment(exercises: Iterable[WorkoutExercise]) -> List[str]:
    """Unique equipment across exercises, in first-seen order."""
    return _unique(item for exercise in exercises for item in exercise.equipment)


def create_workout_template(
    name: str,
    exercises: Sequence[Dict[str, Any]],
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    workout_type: WorkoutType = WorkoutType.STRENGTH,
    difficulty: Difficulty = Difficulty.INTERMEDIATE,
    rest_seconds: int = DEFAULT_REST_SECONDS,
    warmup_buffer_minutes: int = WARMUP_BUFFER_MINUTES,
) -> WorkoutTemplateData:
    """
    Build a template from a compact exercise description.

    Each exercise is a dict with ``exercise_key`` and a list of ``sets``
    (``reps``, ``weight``, ``duration``, ``distance``, ``calories``,
    ``type``). Missing display data is resolved from the exercise catalog.
    Exercises get ids ``exercise-N`` and sets ``set-N``.

    Raises:
        TemplateValidationError: If the resulting template is malformed
    """
    try:
        built: List[WorkoutExercise] = []
        for ex_index, raw in enumerate(exercises, start=1):
            key = raw.get("exercise_key") or raw.get("exerciseKey")
            if not key:
                raise TemplateValidationError(
                    "Exercise key is required",
                    field=f"exercises[{ex_index - 1}].exerciseKey",
                )
            info = resolve_exercise(key)
            sets = [
                WorkoutSet(
                    id=f"set-{set_index}",
                    type=raw_set.get("type") or SetType.STANDARD,
                    target_reps=raw_set.get("reps"),
                    target_weight=raw_set.get("weight"),
                    target_duration=raw_set.get("duration"),
                    target_distance=raw_set.get("distance"),
                    target_calories=raw_set.get("calories"),
                    rest_time=rest_seconds,
                    notes=raw_set.get("notes"),
                )
                for set_index, raw_set in enumerate(raw.get("sets") or [], start=1)
            ]
            built.append(
                WorkoutExercise(
                    id=f"exercise-{ex_index}",
                    exercise_key=key,
                    name=raw.get("name") or info.name,
                    muscles=list(raw.get("muscles") or info.muscles),
                    equipment=list(raw.get("equipment") or info.equipment),
                    sets=sets,
                    instructions=raw.get("instructions"),
                    rest_between_sets=rest_seconds,
                )
            )

        metadata = TemplateMetadata(
            name=name,
            description=description,
            tags=tags or [],
            estimated_duration=calculate_estimated_duration(built, warmup_buffer_minutes),
            difficulty=difficulty,
            workout_type=workout_type,
            target_muscle_groups=extract_muscle_groups(built),
            equipment=extract_equipment(built),
        )
        return WorkoutTemplateData(
            metadata=metadata,
            exercises=built,
            structure={"main": [exercise.id for exercise in built]},
        )
    except PydanticValidationError as e:
        raise TemplateValidationError(
            "Invalid workout template",
            details={"errors": format_validation_errors(e)},
        ) from e
