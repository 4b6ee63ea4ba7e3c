"""Pure calculations over templates and performed sessions."""

from .session import (
    calculate_exercise_volume,
    calculate_session_metrics,
    convert_exercise_progress_to_performance,
    create_workout_session,
    recalculate_performance,
    recalculate_performance_map,
)
from .template import (
    calculate_estimated_duration,
    calculate_template_volume,
    create_workout_template,
    extract_equipment,
    extract_muscle_groups,
)

__all__ = [
    "calculate_exercise_volume",
    "calculate_session_metrics",
    "convert_exercise_progress_to_performance",
    "create_workout_session",
    "recalculate_performance",
    "recalculate_performance_map",
    "calculate_estimated_duration",
    "calculate_template_volume",
    "create_workout_template",
    "extract_equipment",
    "extract_muscle_groups",
]
