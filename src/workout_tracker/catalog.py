"""Static exercise reference data.

Templates store exercise display data denormalized from this catalog. A key
missing from the catalog resolves to itself as the display name with empty
muscle/equipment lists, so a template is never rejected for an unknown key.
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class ExerciseInfo:
    """Display data for a catalog exercise."""

    name: str
    muscles: List[str] = field(default_factory=list)
    equipment: List[str] = field(default_factory=list)


EXERCISE_CATALOG: Dict[str, ExerciseInfo] = {
    # Chest
    "Bench Press": ExerciseInfo("Bench Press", ["Chest", "Triceps", "Front Deltoids"], ["Barbell", "Bench"]),
    "Incline Bench Press": ExerciseInfo(
        "Incline Bench Press", ["Upper Chest", "Triceps", "Front Deltoids"], ["Barbell", "Incline Bench"]
    ),
    "Dumbbell Bench Press": ExerciseInfo(
        "Dumbbell Bench Press", ["Chest", "Triceps", "Front Deltoids"], ["Dumbbells", "Bench"]
    ),
    "Push-Ups": ExerciseInfo("Push-Ups", ["Chest", "Triceps", "Front Deltoids", "Core"], ["Body Weight"]),
    "Dips": ExerciseInfo("Dips", ["Chest", "Triceps", "Front Deltoids"], ["Dip Bars", "Body Weight"]),
    # Back
    "Pull-Ups": ExerciseInfo("Pull-Ups", ["Lats", "Biceps", "Upper Back"], ["Pull-up Bar"]),
    "Lat Pulldown": ExerciseInfo("Lat Pulldown", ["Lats", "Biceps", "Upper Back"], ["Lat Pulldown Machine", "Lat Bar"]),
    "Barbell Rows": ExerciseInfo("Barbell Rows", ["Upper Back", "Lats", "Biceps", "Rear Deltoids"], ["Barbell"]),
    "Seated Cable Rows": ExerciseInfo("Seated Cable Rows", ["Upper Back", "Lats", "Biceps"], ["Seated Row Machine", "V-Bar"]),
    "Deadlift": ExerciseInfo("Deadlift", ["Hamstrings", "Glutes", "Lower Back", "Traps"], ["Barbell"]),
    # Legs
    "Back Squats": ExerciseInfo("Back Squats", ["Quadriceps", "Glutes", "Hamstrings", "Core"], ["Barbell", "Squat Rack"]),
    "Front Squats": ExerciseInfo("Front Squats", ["Quadriceps", "Glutes", "Core"], ["Barbell", "Squat Rack"]),
    "Romanian Deadlift": ExerciseInfo("Romanian Deadlift", ["Hamstrings", "Glutes", "Lower Back"], ["Barbell"]),
    "Leg Press": ExerciseInfo("Leg Press", ["Quadriceps", "Glutes", "Hamstrings"], ["Leg Press Machine"]),
    "Walking Lunges": ExerciseInfo("Walking Lunges", ["Quadriceps", "Glutes", "Hamstrings"], ["Dumbbells", "Body Weight"]),
    # Shoulders and arms
    "Overhead Press": ExerciseInfo("Overhead Press", ["Front Deltoids", "Side Deltoids", "Triceps"], ["Barbell"]),
    "Lateral Raises": ExerciseInfo("Lateral Raises", ["Side Deltoids"], ["Dumbbells"]),
    "Face Pulls": ExerciseInfo("Face Pulls", ["Rear Deltoids", "Upper Back", "Rotator Cuff"], ["Cable Machine", "Rope Attachment"]),
    "Barbell Curls": ExerciseInfo("Barbell Curls", ["Biceps", "Forearms"], ["Barbell"]),
    "Tricep Pushdowns": ExerciseInfo("Tricep Pushdowns", ["Triceps"], ["Cable Machine"]),
    # Conditioning
    "Plank": ExerciseInfo("Plank", ["Core"], ["Body Weight"]),
    "Rowing Machine": ExerciseInfo("Rowing Machine", ["Upper Back", "Legs", "Core"], ["Rowing Machine"]),
    "Treadmill Run": ExerciseInfo("Treadmill Run", ["Legs", "Cardiovascular"], ["Treadmill"]),
}


def resolve_exercise(exercise_key: str) -> ExerciseInfo:
    """Look up display data for an exercise key.

    Unknown keys fall back to the key itself as the name.
    """
    info = EXERCISE_CATALOG.get(exercise_key)
    if info is None:
        return ExerciseInfo(name=exercise_key)
    return info
