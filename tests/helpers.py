"""Builders shared by the test modules."""

from datetime import datetime, timezone

from workout_tracker.models.sessions import ExercisePerformance, PerformedSet


USER_ID = "user-1"
OTHER_USER_ID = "user-2"
NOW = datetime(2024, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


def bench_template_dict(name: str = "Push Day") -> dict:
    """Template document with one Bench Press exercise of two sets."""
    return {
        "metadata": {"name": name, "difficulty": "intermediate", "workoutType": "strength"},
        "exercises": [
            {
                "id": "exercise-1",
                "exerciseKey": "Bench Press",
                "name": "Bench Press",
                "muscles": ["Chest", "Triceps"],
                "equipment": ["Barbell", "Bench"],
                "sets": [
                    {"id": "set-1", "targetReps": 10, "targetWeight": 135, "restTime": 90},
                    {"id": "set-2", "targetReps": 8, "targetWeight": 140, "restTime": 90},
                ],
                "restBetweenSets": 90,
            }
        ],
    }


def bench_performance(first=(135, 10), second=(140, 8)) -> dict:
    """Performance map with both Bench Press sets completed."""
    return {
        "exercise-1": ExercisePerformance(
            exercise_key="Bench Press",
            sets=[
                PerformedSet(set_id="set-1", actual_weight=first[0], actual_reps=first[1], completed=True),
                PerformedSet(set_id="set-2", actual_weight=second[0], actual_reps=second[1], completed=True),
            ],
        )
    }
