"""Tests for session metric calculations."""

import pytest

from workout_tracker.exceptions import PerformanceValidationError
from workout_tracker.metrics.session import (
    calculate_exercise_volume,
    calculate_session_metrics,
    convert_exercise_progress_to_performance,
    create_workout_session,
    recalculate_performance,
    round_half_up,
)
from workout_tracker.models.sessions import ExercisePerformance, PerformedSet

from helpers import bench_performance


def _performance(*sets: PerformedSet, key: str = "Bench Press") -> ExercisePerformance:
    return ExercisePerformance(exercise_key=key, sets=list(sets))


class TestVolume:
    """Tests for volume calculation."""

    def test_bench_press_example(self):
        metrics = calculate_session_metrics(bench_performance())
        assert metrics.total_volume == 2470
        assert metrics.total_sets == 2
        assert metrics.completed_sets == 2
        assert metrics.total_exercises == 1

    def test_only_completed_sets_count(self):
        sets = [
            PerformedSet(set_id="set-1", actual_weight=100, actual_reps=5, completed=True),
            PerformedSet(set_id="set-2", actual_weight=100, actual_reps=5, completed=False),
        ]
        assert calculate_exercise_volume(sets) == 500

    def test_volume_ignores_stale_cached_total(self):
        performance = bench_performance()
        performance["exercise-1"] = performance["exercise-1"].model_copy(update={"total_volume": 99999})
        assert calculate_session_metrics(performance).total_volume == 2470

    def test_recomputation_is_idempotent(self):
        first = calculate_session_metrics(bench_performance())
        second = calculate_session_metrics(bench_performance())
        assert first == second

    def test_recalculate_performance_sets_cached_values(self):
        entry = _performance(
            PerformedSet(set_id="set-1", actual_weight=100, actual_reps=5, actual_rpe=7, completed=True),
            PerformedSet(set_id="set-2", actual_weight=100, actual_reps=5, actual_rpe=9, completed=True),
            PerformedSet(set_id="set-3", actual_weight=100, actual_reps=5, actual_rpe=10),
        )
        recalculated = recalculate_performance(entry)
        assert recalculated.total_volume == 1000
        assert recalculated.average_rpe == 8
        assert entry.total_volume == 0


class TestAdherence:
    """Tests for the adherence score."""

    def test_empty_map_is_fully_adherent(self):
        metrics = calculate_session_metrics({})
        assert metrics.adherence_score == 100
        assert metrics.total_volume == 0
        assert metrics.total_sets == 0

    def test_exercise_without_sets_is_fully_adherent(self):
        metrics = calculate_session_metrics({"exercise-1": _performance()})
        assert metrics.adherence_score == 100

    def test_skipped_sets_count_as_adherent(self):
        metrics = calculate_session_metrics({
            "exercise-1": _performance(
                PerformedSet(set_id="set-1", completed=True),
                PerformedSet(set_id="set-2", skipped=True),
                PerformedSet(set_id="set-3"),
            )
        })
        assert metrics.skipped_sets == 1
        assert metrics.adherence_score == 67

    def test_half_rounds_up(self):
        sets = [PerformedSet(set_id=f"set-{i}", completed=i < 1) for i in range(8)]
        # 1/8 = 12.5%
        metrics = calculate_session_metrics({"exercise-1": _performance(*sets)})
        assert metrics.adherence_score == 13

    def test_no_sets_done(self):
        metrics = calculate_session_metrics({
            "exercise-1": _performance(PerformedSet(set_id="set-1"), PerformedSet(set_id="set-2"))
        })
        assert metrics.adherence_score == 0

    @pytest.mark.parametrize("value,expected", [(0.5, 1), (1.49, 1), (2.5, 3), (66.666, 67)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestRpe:
    def test_average_and_max_rpe(self):
        metrics = calculate_session_metrics({
            "exercise-1": _performance(
                PerformedSet(set_id="set-1", actual_rpe=6, completed=True),
                PerformedSet(set_id="set-2", actual_rpe=9, completed=True),
            )
        })
        assert metrics.average_rpe == 7.5
        assert metrics.max_rpe == 9

    def test_no_rpe_recorded(self):
        metrics = calculate_session_metrics(bench_performance())
        assert metrics.average_rpe is None
        assert metrics.max_rpe is None


class TestCreateWorkoutSession:
    """Tests for building session documents."""

    def test_session_carries_snapshot_and_metrics(self, bench_template):
        session = create_workout_session(bench_template, bench_performance(), {"gym": "Home"})
        assert session.metrics.total_volume == 2470
        assert session.performance["exercise-1"].total_volume == 2470
        assert session.environment == {"gym": "Home"}
        assert session.template_snapshot == bench_template
        assert session.template_snapshot is not bench_template

    def test_empty_session(self, bench_template):
        session = create_workout_session(bench_template)
        assert session.performance == {}
        assert session.metrics.adherence_score == 100


class TestExerciseProgressConversion:
    """Tests for converting free-form exercise progress."""

    def test_converts_matching_entries(self, bench_template):
        performance = convert_exercise_progress_to_performance(
            {
                "progress-1": {
                    "exerciseId": "exercise-1",
                    "sets": [
                        {"setId": "set-1", "actualWeight": 135, "actualReps": 10, "completed": True,
                         "actualRpe": 8},
                        {"setId": "set-2", "actualWeight": 140, "actualReps": 8, "completed": True},
                    ],
                    "exerciseNotes": "Felt strong",
                }
            },
            bench_template,
        )
        entry = performance["exercise-1"]
        assert entry.exercise_key == "Bench Press"
        assert entry.total_volume == 2470
        assert entry.average_rpe == 8
        assert entry.exercise_notes == "Felt strong"

    def test_key_used_when_exercise_id_missing(self, bench_template):
        performance = convert_exercise_progress_to_performance(
            {"exercise-1": {"sets": [{"setId": "set-1", "actualWeight": 100, "actualReps": 5, "completed": True}]}},
            bench_template,
        )
        assert performance["exercise-1"].total_volume == 500

    def test_unknown_exercises_dropped(self, bench_template):
        performance = convert_exercise_progress_to_performance(
            {"x": {"exerciseId": "exercise-42", "sets": []}},
            bench_template,
        )
        assert performance == {}

    def test_malformed_sets_raise_domain_error(self, bench_template):
        with pytest.raises(PerformanceValidationError) as exc_info:
            convert_exercise_progress_to_performance(
                {"x": {"exerciseId": "exercise-1", "sets": [{"setId": "set-1", "actualReps": -1}]}},
                bench_template,
            )
        assert exc_info.value.details["errors"]
        assert exc_info.value.status_code == 400

    def test_non_object_entry_rejected(self, bench_template):
        with pytest.raises(PerformanceValidationError):
            convert_exercise_progress_to_performance({"x": 5}, bench_template)
