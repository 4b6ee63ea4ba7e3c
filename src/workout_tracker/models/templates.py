"""Workout template document models.

A template is the immutable blueprint a session is performed against. It is
stored as a JSON document; validation happens on every parse.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, ValidationError as PydanticValidationError

from .base import CamelModel


class SetType(str, Enum):
    """Kinds of target sets within an exercise."""
    STANDARD = "standard"
    WARMUP = "warmup"
    WORKING = "working"
    DROPSET = "dropset"
    SUPERSET = "superset"
    AMRAP = "amrap"
    EMOM = "emom"
    TABATA = "tabata"
    REST = "rest"


class WorkoutType(str, Enum):
    """Overall workout style."""
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    ENDURANCE = "endurance"
    CARDIO = "cardio"
    HIIT = "hiit"
    MOBILITY = "mobility"
    MIXED = "mixed"


class Difficulty(str, Enum):
    """Template difficulty levels."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class WorkoutSet(CamelModel):
    """A target set within a template exercise."""

    id: str = Field(..., min_length=1, description="Set identifier, e.g. set-1")
    type: SetType = Field(default=SetType.STANDARD, description="Set type")
    target_reps: Optional[int] = Field(None, ge=0)
    target_weight: Optional[float] = Field(None, ge=0)
    target_duration: Optional[float] = Field(None, ge=0, description="Seconds")
    target_distance: Optional[float] = Field(None, ge=0)
    target_calories: Optional[float] = Field(None, ge=0)
    rest_time: int = Field(default=60, ge=0, description="Rest after this set in seconds")
    notes: Optional[str] = None


class WorkoutExercise(CamelModel):
    """An exercise entry in a template, with display data denormalized from the catalog."""

    id: str = Field(..., min_length=1, description="Exercise identifier, e.g. exercise-1")
    exercise_key: str = Field(..., min_length=1, description="Stable catalog key")
    name: str = Field(..., min_length=1)
    muscles: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)
    sets: List[WorkoutSet] = Field(..., min_length=1)
    instructions: Optional[str] = None
    rest_between_sets: int = Field(default=60, ge=0)


class TemplateMetadata(CamelModel):
    """Descriptive template metadata."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    estimated_duration: Optional[int] = Field(None, ge=0, description="Minutes")
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    workout_type: WorkoutType = WorkoutType.STRENGTH
    target_muscle_groups: List[str] = Field(default_factory=list)
    equipment: List[str] = Field(default_factory=list)


class WorkoutTemplateData(CamelModel):
    """The template document: metadata plus an ordered list of exercises."""

    metadata: TemplateMetadata
    exercises: List[WorkoutExercise] = Field(..., min_length=1)
    structure: Optional[Dict[str, List[str]]] = None

    def find_exercise(self, exercise_id: str) -> Optional[WorkoutExercise]:
        """Find an exercise by its template id."""
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    def find_exercise_by_key(self, exercise_key: str) -> Optional[WorkoutExercise]:
        """Find the first exercise using a catalog key."""
        for exercise in self.exercises:
            if exercise.exercise_key == exercise_key:
                return exercise
        return None

    def snapshot(self) -> "WorkoutTemplateData":
        """Deep copy used as a session's template snapshot."""
        return self.model_copy(deep=True)


def is_valid_template(data: Any) -> bool:
    """Return True iff data is a well-formed template.

    A template is valid when it has a name, a non-empty exercise list and
    every exercise has at least one set.
    """
    if isinstance(data, WorkoutTemplateData):
        data = data.model_dump(by_alias=True)
    if not isinstance(data, dict):
        return False
    try:
        WorkoutTemplateData.model_validate(data)
    except PydanticValidationError:
        return False
    return True


class TemplateSetInput(CamelModel):
    """Compact set description accepted by the template builder."""

    reps: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    duration: Optional[float] = Field(None, ge=0)
    distance: Optional[float] = Field(None, ge=0)
    calories: Optional[float] = Field(None, ge=0)
    type: Optional[SetType] = None
    notes: Optional[str] = None


class TemplateExerciseInput(CamelModel):
    """Compact exercise description; display data defaults to the catalog."""

    exercise_key: str = Field(..., min_length=1)
    name: Optional[str] = None
    muscles: Optional[List[str]] = None
    equipment: Optional[List[str]] = None
    instructions: Optional[str] = None
    sets: List[TemplateSetInput] = Field(..., min_length=1)


class TemplateBuildRequest(CamelModel):
    """Input to build a template from compact exercise descriptions."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    workout_type: WorkoutType = WorkoutType.STRENGTH
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    exercises: List[TemplateExerciseInput] = Field(..., min_length=1)


class WorkoutTemplateRecord(CamelModel):
    """A stored template owned by a user."""

    id: str
    user_id: str
    name: str
    template_data: WorkoutTemplateData
    total_volume: float = 0.0
    estimated_duration: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
