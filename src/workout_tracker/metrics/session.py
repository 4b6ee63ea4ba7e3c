"""Session metric calculations (volume, set counts, adherence, RPE).

All functions here are pure: they read a performance map and return new
values without touching storage. Stored ``totalVolume`` fields are a cache of
these computations and are always recomputed from the sets.
"""

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import PerformanceValidationError
from ..models.base import format_validation_errors
from ..models.sessions import (
    ExercisePerformance,
    PerformedSet,
    SessionMetrics,
    WorkoutSessionData,
)
from ..models.templates import WorkoutTemplateData


PerformanceMap = Dict[str, ExercisePerformance]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def calculate_exercise_volume(sets: Iterable[PerformedSet]) -> float:
    """Sum of weight x reps over completed sets."""
    return float(sum(performed.volume for performed in sets))


def _average_rpe(sets: Iterable[PerformedSet]) -> Optional[float]:
    rpes = [s.actual_rpe for s in sets if s.completed and s.actual_rpe is not None]
    if not rpes:
        return None
    return sum(rpes) / len(rpes)


def recalculate_performance(performance: ExercisePerformance) -> ExercisePerformance:
    """Return a copy with ``total_volume`` and ``average_rpe`` recomputed from its sets."""
    return performance.model_copy(
        update={
            "total_volume": calculate_exercise_volume(performance.sets),
            "average_rpe": _average_rpe(performance.sets),
        }
    )


def recalculate_performance_map(performance: Mapping[str, ExercisePerformance]) -> PerformanceMap:
    """Recompute cached volumes for every exercise in a performance map."""
    return {key: recalculate_performance(entry) for key, entry in performance.items()}


def calculate_session_metrics(performance: Mapping[str, ExercisePerformance]) -> SessionMetrics:
    """
    Derive session aggregates from a performance map.

    Volume is taken from the sets themselves rather than the cached
    ``total_volume`` so that recomputing over the same map is idempotent.
    An empty map (or one with no sets) has an adherence score of 100.

    Args:
        performance: Mapping of exercise id to its performance

    Returns:
        SessionMetrics with empty PR lists; PR events are attached later
    """
    total_volume = 0.0
    total_sets = 0
    completed_sets = 0
    skipped_sets = 0
    rpes: List[float] = []

    for entry in performance.values():
        total_volume += calculate_exercise_volume(entry.sets)
        for performed in entry.sets:
            total_sets += 1
            if performed.completed:
                completed_sets += 1
            if performed.skipped:
                skipped_sets += 1
            if performed.actual_rpe is not None:
                rpes.append(performed.actual_rpe)

    if total_sets > 0:
        adherence = round_half_up((completed_sets + skipped_sets) / total_sets * 100)
        adherence = max(0, min(100, adherence))
    else:
        adherence = 100

    return SessionMetrics(
        total_volume=total_volume,
        total_sets=total_sets,
        total_exercises=len(performance),
        completed_sets=completed_sets,
        skipped_sets=skipped_sets,
        adherence_score=adherence,
        average_rpe=sum(rpes) / len(rpes) if rpes else None,
        max_rpe=max(rpes) if rpes else None,
    )


def convert_exercise_progress_to_performance(
    exercise_progress: Mapping[str, Any],
    template: WorkoutTemplateData,
) -> PerformanceMap:
    """
    Convert free-form exercise progress entries into a performance map.

    Each progress entry names the template exercise it belongs to through
    ``exerciseId``; entries pointing at exercises missing from the template
    are dropped.

    Raises:
        PerformanceValidationError: If an entry's sets are malformed
    """
    performance: PerformanceMap = {}

    for key, progress in exercise_progress.items():
        if not isinstance(progress, Mapping):
            raise PerformanceValidationError(
                "Exercise progress entry must be an object",
                field=f"exerciseProgress.{key}",
            )
        exercise_id = progress.get("exerciseId") or progress.get("exercise_id") or key
        exercise = template.find_exercise(exercise_id)
        if exercise is None:
            continue

        try:
            sets = [PerformedSet.model_validate(raw) for raw in progress.get("sets") or []]
        except PydanticValidationError as e:
            raise PerformanceValidationError(
                f"Invalid set data for exercise '{exercise_id}'",
                field=f"exerciseProgress.{key}.sets",
                details={"errors": format_validation_errors(e)},
            ) from e

        performance[exercise_id] = recalculate_performance(
            ExercisePerformance(
                exercise_key=exercise.exercise_key,
                sets=sets,
                exercise_notes=progress.get("exerciseNotes"),
            )
        )

    return performance


def create_workout_session(
    template: WorkoutTemplateData,
    performance: Optional[Mapping[str, ExercisePerformance]] = None,
    environment: Optional[Dict[str, Any]] = None,
) -> WorkoutSessionData:
    """Build a session document from a template snapshot and performance."""
    recalculated = recalculate_performance_map(performance or {})
    return WorkoutSessionData(
        template_snapshot=template.snapshot(),
        performance=recalculated,
        environment=dict(environment or {}),
        metrics=calculate_session_metrics(recalculated),
    )
