"""
Tests for the session lifecycle service.

Tests cover:
- Starting, replacing, updating, pausing and resuming the active session
- Optimistic version checks
- Completion: metrics, counters, monthly stats, records and achievements
- Best-effort enrichment and transactional rollback
- Recovery, ending, scheduling and logging sessions
"""

import sqlite3
from datetime import timedelta
from unittest.mock import patch

import pytest

from workout_tracker.exceptions import (
    ActiveSessionExistsError,
    ActiveSessionNotFoundError,
    ConflictError,
    DatabaseError,
    PerformanceValidationError,
    SessionNotFoundError,
    SessionRecoveryConflictError,
    SessionVersionConflictError,
    TemplateNotFoundError,
)
from workout_tracker.models.personal_records import PRType
from workout_tracker.models.sessions import (
    ActiveSessionUpdatePayload,
    CompleteSessionRequest,
    LogSessionRequest,
    RecoverSessionRequest,
    ScheduleSessionRequest,
    SessionStatus,
    StartSessionRequest,
)

from helpers import NOW, OTHER_USER_ID, USER_ID, bench_performance, bench_template_dict


def _start_request(template, replace=False, scheduled_session_id=None) -> StartSessionRequest:
    return StartSessionRequest(
        template_id=template.id,
        template_name=template.name,
        template=template.template_data,
        replace=replace,
        scheduled_session_id=scheduled_session_id,
    )


@pytest.fixture
def active(session_service, stored_template):
    """An active session started at NOW."""
    return session_service.start_session(USER_ID, _start_request(stored_template), now=NOW)


class TestStartSession:
    """Tests for starting the active session."""

    def test_start_creates_active_session(self, session_service, stored_template, active):
        assert active.active_session.template_id == stored_template.id
        assert active.active_session.version == 1
        assert active.active_session.is_timer_active is True
        assert active.elapsed_seconds == 0

        state = session_service.get_active_session_state(USER_ID, now=NOW + timedelta(minutes=2))
        assert state.elapsed_seconds == 120

    def test_start_while_active_rejected(self, session_service, stored_template, active):
        with pytest.raises(ActiveSessionExistsError) as exc_info:
            session_service.start_session(USER_ID, _start_request(stored_template), now=NOW)
        assert exc_info.value.status_code == 409
        assert exc_info.value.details["active_template_id"] == stored_template.id

    def test_replace_discards_existing(self, session_service, template_service, stored_template, active):
        other = template_service.create_template(USER_ID, bench_template_dict("Leg Day"))
        later = NOW + timedelta(minutes=5)
        replaced = session_service.start_session(USER_ID, _start_request(other, replace=True), now=later)
        assert replaced.active_session.template_id == other.id
        assert session_service.get_active_session(USER_ID).template_id == other.id
        assert session_service.get_active_session(USER_ID).started_at == later

    def test_unknown_template(self, session_service, stored_template):
        request = _start_request(stored_template)
        request.template_id = "missing"
        with pytest.raises(TemplateNotFoundError):
            session_service.start_session(USER_ID, request, now=NOW)

    def test_template_of_another_user(self, session_service, stored_template):
        with pytest.raises(TemplateNotFoundError):
            session_service.start_session(OTHER_USER_ID, _start_request(stored_template), now=NOW)

    def test_no_active_session(self, session_service):
        with pytest.raises(ActiveSessionNotFoundError):
            session_service.get_active_session(USER_ID)

    def test_sessions_are_per_user(self, session_service, template_service, active):
        theirs = template_service.create_template(OTHER_USER_ID, bench_template_dict())
        session_service.start_session(OTHER_USER_ID, _start_request(theirs), now=NOW)
        assert session_service.get_active_session(USER_ID).template_id != theirs.id


class TestUpdateActiveSession:
    """Tests for versioned updates."""

    def test_update_bumps_version(self, session_service, active):
        response = session_service.update_active_session(
            USER_ID,
            ActiveSessionUpdatePayload(session_notes="Felt good", version=1),
            now=NOW + timedelta(minutes=1),
        )
        assert response.active_session.version == 2
        assert response.active_session.session_notes == "Felt good"
        assert session_service.get_active_session(USER_ID).version == 2

    def test_stale_version_rejected(self, session_service, active):
        session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(session_notes="a", version=1))
        with pytest.raises(SessionVersionConflictError) as exc_info:
            session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(session_notes="b", version=1))
        assert exc_info.value.details["current_version"] == 2
        assert session_service.get_active_session(USER_ID).session_notes == "a"

    def test_update_without_version_accepted(self, session_service, active):
        response = session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(session_notes="x"))
        assert response.active_session.version == 2

    def test_performance_volume_recalculated(self, session_service, active):
        performance = bench_performance()
        performance["exercise-1"] = performance["exercise-1"].model_copy(update={"total_volume": 1})
        response = session_service.update_active_session(
            USER_ID, ActiveSessionUpdatePayload(performance=performance, version=1)
        )
        assert response.active_session.performance["exercise-1"].total_volume == 2470

    def test_unset_fields_untouched(self, session_service, active):
        session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(session_notes="keep"))
        session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(paused_time=10))
        current = session_service.get_active_session(USER_ID)
        assert current.session_notes == "keep"
        assert current.paused_time == 10

    def test_modified_template_can_be_cleared(self, session_service, active):
        session_service.update_active_session(
            USER_ID, ActiveSessionUpdatePayload(modified_template=bench_template_dict("Edited"))
        )
        assert session_service.get_active_session(USER_ID).current_template.metadata.name == "Edited"
        session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(modified_template=None))
        assert session_service.get_active_session(USER_ID).modified_template is None

    def test_update_without_active_session(self, session_service):
        with pytest.raises(ActiveSessionNotFoundError):
            session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(session_notes="x"))


class TestTimer:
    """Tests for pause, resume and toggle."""

    def test_pause_and_resume_accumulate_paused_time(self, session_service, active):
        session_service.pause_session(USER_ID, now=NOW + timedelta(minutes=10))
        paused = session_service.get_active_session_state(USER_ID, now=NOW + timedelta(minutes=14))
        assert paused.active_session.is_timer_active is False
        assert paused.elapsed_seconds == 600

        resumed = session_service.resume_session(USER_ID, now=NOW + timedelta(minutes=15))
        assert resumed.active_session.paused_time == 300
        assert resumed.active_session.last_pause_time is None

        state = session_service.get_active_session_state(USER_ID, now=NOW + timedelta(minutes=30))
        assert state.elapsed_seconds == 1500

    def test_toggle(self, session_service, active):
        first = session_service.toggle_timer(USER_ID, version=1, now=NOW + timedelta(minutes=1))
        assert first.active_session.is_timer_active is False
        second = session_service.toggle_timer(USER_ID, version=2, now=NOW + timedelta(minutes=2))
        assert second.active_session.is_timer_active is True
        assert second.active_session.paused_time == 60
        assert second.active_session.version == 3

    def test_pause_twice_keeps_first_pause_time(self, session_service, active):
        session_service.pause_session(USER_ID, now=NOW + timedelta(minutes=1))
        session_service.pause_session(USER_ID, now=NOW + timedelta(minutes=5))
        current = session_service.get_active_session(USER_ID)
        assert current.last_pause_time == NOW + timedelta(minutes=1)

    def test_pause_with_stale_version(self, session_service, active):
        session_service.pause_session(USER_ID, now=NOW)
        with pytest.raises(SessionVersionConflictError):
            session_service.resume_session(USER_ID, version=1, now=NOW)

    def test_pause_through_update_freezes_clock(self, session_service, active):
        paused = session_service.update_active_session(
            USER_ID, ActiveSessionUpdatePayload(is_timer_active=False), now=NOW + timedelta(minutes=10)
        )
        assert paused.active_session.last_pause_time == NOW + timedelta(minutes=10)
        assert paused.elapsed_seconds == 600

        later = session_service.get_active_session_state(USER_ID, now=NOW + timedelta(minutes=30))
        assert later.elapsed_seconds == 600

    def test_resume_through_update_folds_pause(self, session_service, active):
        session_service.pause_session(USER_ID, now=NOW + timedelta(minutes=10))
        resumed = session_service.update_active_session(
            USER_ID,
            ActiveSessionUpdatePayload(is_timer_active=True, session_notes="back"),
            now=NOW + timedelta(minutes=30),
        )
        assert resumed.active_session.is_timer_active is True
        assert resumed.active_session.paused_time == 1200
        assert resumed.active_session.last_pause_time is None
        assert resumed.active_session.session_notes == "back"
        assert resumed.elapsed_seconds == 600

    def test_completion_duration_excludes_pause_set_through_update(self, session_service, active):
        session_service.update_active_session(
            USER_ID, ActiveSessionUpdatePayload(is_timer_active=False), now=NOW + timedelta(minutes=10)
        )
        result = session_service.complete_active_session(
            USER_ID, CompleteSessionRequest(), now=NOW + timedelta(minutes=45)
        )
        assert result.session.duration == 600


class TestCompleteActiveSession:
    """Tests for completing the active session."""

    def test_bench_press_completion(self, session_service, stats_repo, active):
        result = session_service.complete_active_session(
            USER_ID,
            CompleteSessionRequest(performance=bench_performance(), notes="Good session"),
            now=NOW + timedelta(minutes=30),
        )
        session = result.session
        assert session.status == SessionStatus.COMPLETED
        assert session.total_volume == 2470
        assert session.total_sets == 2
        assert session.duration == 1800
        assert session.notes == "Good session"
        assert session.performance_data.metrics.total_volume == 2470
        assert session.performance_data.metrics.adherence_score == 100

        by_type = {p.type: p for p in result.new_prs}
        assert by_type[PRType.MAX_WEIGHT].value == 140
        assert by_type[PRType.MAX_WEIGHT].reps == 8
        assert by_type[PRType.MAX_VOLUME].value == 2470
        assert session.personal_records == 2
        assert session.performance_data.metrics.personal_records[0].type == PRType.MAX_WEIGHT
        assert session.performance_data.metrics.volume_records[0].value == 2470

        with pytest.raises(ActiveSessionNotFoundError):
            session_service.get_active_session(USER_ID)

        stats = stats_repo.get_stats(USER_ID)
        assert stats.total_workouts == 1
        assert stats.total_volume == 2470
        assert stats.total_training_hours == pytest.approx(0.5)
        assert stats.unique_exercises == 1
        assert stats.longest_streak == 1
        assert stats.active_weeks == 1
        assert stats.personal_record_count == 2

        monthly = stats_repo.get_monthly_stats(USER_ID)
        assert (monthly[0].year, monthly[0].month, monthly[0].workouts_count) == (2024, 3, 1)
        assert monthly[0].total_volume == 2470

    def test_stored_session_matches_result(self, session_service, active):
        result = session_service.complete_active_session(
            USER_ID, CompleteSessionRequest(performance=bench_performance()), now=NOW
        )
        stored = session_service.get_session(USER_ID, result.session.id)
        assert stored.personal_records == 2
        assert stored.performance_data.metrics == result.session.performance_data.metrics

    def test_uses_session_performance_when_request_has_none(self, session_service, active):
        session_service.update_active_session(
            USER_ID, ActiveSessionUpdatePayload(performance=bench_performance())
        )
        result = session_service.complete_active_session(USER_ID, CompleteSessionRequest(duration=600), now=NOW)
        assert result.session.total_volume == 2470
        assert result.session.duration == 600

    def test_converts_exercise_progress(self, session_service, active):
        session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(exercise_progress={
            "p-1": {
                "exerciseId": "exercise-1",
                "sets": [{"setId": "set-1", "actualWeight": 100, "actualReps": 10, "completed": True}],
            },
        }))
        result = session_service.complete_active_session(USER_ID, CompleteSessionRequest(), now=NOW)
        assert result.session.total_volume == 1000

    def test_empty_session_is_fully_adherent(self, session_service, active):
        result = session_service.complete_active_session(USER_ID, CompleteSessionRequest(), now=NOW)
        assert result.session.performance_data.metrics.adherence_score == 100
        assert result.session.total_volume == 0
        assert result.new_prs == []

    def test_no_active_session(self, session_service):
        with pytest.raises(ActiveSessionNotFoundError):
            session_service.complete_active_session(USER_ID, CompleteSessionRequest())

    def test_snapshot_survives_template_edit_and_delete(
        self, session_service, template_service, stored_template, active
    ):
        result = session_service.complete_active_session(
            USER_ID, CompleteSessionRequest(performance=bench_performance()), now=NOW
        )
        before = result.session.performance_data.template_snapshot

        edited = bench_template_dict("Renamed")
        edited["exercises"][0]["name"] = "Incline Press"
        template_service.update_template(USER_ID, stored_template.id, edited)
        stored = session_service.get_session(USER_ID, result.session.id)
        assert stored.performance_data.template_snapshot == before

        template_service.delete_template(USER_ID, stored_template.id)
        stored = session_service.get_session(USER_ID, result.session.id)
        assert stored.performance_data.template_snapshot == before
        assert stored.performance_data.template_snapshot.exercises[0].name == "Bench Press"

    def test_snapshot_uses_modified_template(self, session_service, active):
        session_service.update_active_session(
            USER_ID, ActiveSessionUpdatePayload(modified_template=bench_template_dict("Edited mid-session"))
        )
        result = session_service.complete_active_session(USER_ID, CompleteSessionRequest(), now=NOW)
        assert result.session.performance_data.template_snapshot.metadata.name == "Edited mid-session"

    def test_pr_store_failure_does_not_fail_completion(self, session_service, pr_service, stats_repo, active):
        with patch.object(pr_service, "process_session_prs", side_effect=RuntimeError("store unavailable")):
            result = session_service.complete_active_session(
                USER_ID, CompleteSessionRequest(performance=bench_performance()), now=NOW
            )
        assert result.new_prs == []
        assert result.session.total_volume == 2470
        assert session_service.get_session(USER_ID, result.session.id).personal_records == 0
        assert stats_repo.get_stats(USER_ID).total_workouts == 1
        with pytest.raises(ActiveSessionNotFoundError):
            session_service.get_active_session(USER_ID)

    def test_achievement_failure_does_not_fail_completion(
        self, session_service, achievement_service, stats_repo, active
    ):
        with patch.object(achievement_service, "update_user_achievements", side_effect=RuntimeError("boom")):
            result = session_service.complete_active_session(
                USER_ID, CompleteSessionRequest(performance=bench_performance()), now=NOW
            )
        assert result.new_achievements == []
        assert len(result.new_prs) == 2
        assert stats_repo.get_stats(USER_ID).total_workouts == 1

    def test_records_reported_when_session_annotation_fails(
        self, session_service, session_repo, stats_repo, active, caplog
    ):
        original_save = session_repo.save

        def fail_outside_transaction(entity, conn=None):
            if conn is None:
                raise sqlite3.OperationalError("database is locked")
            return original_save(entity, conn=conn)

        with patch.object(session_repo, "save", side_effect=fail_outside_transaction):
            result = session_service.complete_active_session(
                USER_ID, CompleteSessionRequest(performance=bench_performance()), now=NOW
            )
        assert {p.type for p in result.new_prs} == {PRType.MAX_WEIGHT, PRType.MAX_VOLUME}
        assert stats_repo.get_personal_records(USER_ID)["Bench Press"].max_weight.value == 140
        assert "Failed to attach personal records" in caplog.text

    def test_explicit_empty_performance_is_used(self, session_service, active):
        session_service.update_active_session(
            USER_ID, ActiveSessionUpdatePayload(performance=bench_performance())
        )
        result = session_service.complete_active_session(
            USER_ID, CompleteSessionRequest(performance={}), now=NOW
        )
        assert result.session.total_volume == 0
        assert result.session.total_sets == 0
        assert result.new_prs == []

    def test_enrichment_failure_is_logged(self, session_service, pr_service, active, caplog):
        with patch.object(pr_service, "process_session_prs", side_effect=RuntimeError("store unavailable")):
            session_service.complete_active_session(USER_ID, CompleteSessionRequest(), now=NOW)
        assert "Failed to process personal records" in caplog.text
        assert USER_ID in caplog.text

    def test_transaction_rolls_back_on_storage_error(self, session_service, stats_repo, session_repo, active):
        with patch.object(
            stats_repo, "upsert_monthly_stats", side_effect=sqlite3.OperationalError("disk I/O error")
        ):
            with pytest.raises(DatabaseError):
                session_service.complete_active_session(
                    USER_ID, CompleteSessionRequest(performance=bench_performance()), now=NOW
                )
        assert session_repo.count(user_id=USER_ID) == 0
        assert stats_repo.get_stats(USER_ID).total_workouts == 0
        assert session_service.get_active_session(USER_ID).version == 1

    def test_achievements_unlock_on_fifth_workout(self, session_service, stored_template):
        unlocked = []
        for day in range(5):
            when = NOW + timedelta(days=day)
            session_service.start_session(USER_ID, _start_request(stored_template), now=when)
            result = session_service.complete_active_session(
                USER_ID, CompleteSessionRequest(performance=bench_performance()), now=when
            )
            unlocked.append(result.new_achievements)
        assert unlocked[:3] == [[], [], ["streak_bronze"]]
        assert "workouts_bronze" in unlocked[4]
        assert "volume_bronze" in unlocked[4]


class TestRecoverSession:
    """Tests for recovering the active session."""

    def test_recover_same_template(self, session_service, stored_template, active):
        response = session_service.recover_session(
            USER_ID, RecoverSessionRequest(template_id=stored_template.id), now=NOW + timedelta(minutes=5)
        )
        assert response.recovered is True
        assert response.issues == []
        assert response.active_session.version == 2
        assert response.active_session.started_at == NOW
        assert response.elapsed_seconds == 300

    def test_mismatched_template_conflicts(self, session_service, template_service, active):
        other = template_service.create_template(USER_ID, bench_template_dict("Leg Day"))
        with pytest.raises(SessionRecoveryConflictError) as exc_info:
            session_service.recover_session(USER_ID, RecoverSessionRequest(template_id=other.id))
        details = exc_info.value.details
        assert details["can_recover"] is True
        assert any("mismatch" in issue for issue in details["issues"])
        assert session_service.get_active_session(USER_ID).version == 1

    def test_force_starts_fresh_session(self, session_service, template_service, active):
        other = template_service.create_template(USER_ID, bench_template_dict("Leg Day"))
        response = session_service.recover_session(
            USER_ID, RecoverSessionRequest(template_id=other.id, force=True), now=NOW + timedelta(hours=1)
        )
        assert response.recovered is True
        assert response.issues
        assert response.active_session.template_id == other.id
        assert response.active_session.version == 1
        assert response.elapsed_seconds == 0

    def test_missing_template(self, session_service, template_service, stored_template, active):
        template_service.delete_template(USER_ID, stored_template.id)
        with pytest.raises(SessionRecoveryConflictError) as exc_info:
            session_service.recover_session(USER_ID, RecoverSessionRequest(template_id=stored_template.id))
        assert exc_info.value.details["can_recover"] is False

    def test_force_with_missing_template_clears_session(
        self, session_service, template_service, stored_template, active
    ):
        template_service.delete_template(USER_ID, stored_template.id)
        with pytest.raises(TemplateNotFoundError):
            session_service.recover_session(
                USER_ID, RecoverSessionRequest(template_id=stored_template.id, force=True)
            )
        with pytest.raises(ActiveSessionNotFoundError):
            session_service.get_active_session(USER_ID)

    def test_corrupt_session_data_reported(self, session_service, temp_db, stored_template, active):
        with temp_db.connection() as conn:
            conn.execute(
                "UPDATE user_stats SET active_session_data = ? WHERE user_id = ?",
                (f'{{"templateId": "{stored_template.id}", "startedAt": "not a date"}}', USER_ID),
            )
        with pytest.raises(SessionRecoveryConflictError) as exc_info:
            session_service.recover_session(USER_ID, RecoverSessionRequest(template_id=stored_template.id))
        assert any("Invalid session data" in issue for issue in exc_info.value.details["issues"])

        response = session_service.recover_session(
            USER_ID, RecoverSessionRequest(template_id=stored_template.id, force=True), now=NOW
        )
        assert response.active_session.template_id == stored_template.id

    def test_nothing_to_recover(self, session_service, stored_template):
        with pytest.raises(ActiveSessionNotFoundError):
            session_service.recover_session(USER_ID, RecoverSessionRequest(template_id=stored_template.id))


class TestEndSession:
    def test_end_discards_without_recording(self, session_service, stats_repo, session_repo, active):
        session_service.update_active_session(USER_ID, ActiveSessionUpdatePayload(performance=bench_performance()))
        session_service.end_session(USER_ID)

        with pytest.raises(ActiveSessionNotFoundError):
            session_service.get_active_session(USER_ID)
        assert stats_repo.get_stats(USER_ID).total_workouts == 0
        assert stats_repo.get_personal_records(USER_ID) == {}
        assert session_repo.count(user_id=USER_ID) == 0

    def test_end_without_active_session(self, session_service):
        with pytest.raises(ActiveSessionNotFoundError):
            session_service.end_session(USER_ID)


class TestScheduledSessions:
    """Tests for scheduling, completing and logging sessions."""

    def _schedule(self, session_service, template, when=NOW):
        return session_service.create_scheduled_session(
            USER_ID, ScheduleSessionRequest(template_id=template.id, scheduled_at=when, notes="AM")
        )

    def test_schedule_captures_snapshot(self, session_service, stored_template):
        scheduled = self._schedule(session_service, stored_template)
        assert scheduled.status == SessionStatus.SCHEDULED
        assert scheduled.total_volume == 0
        assert scheduled.performance_data.template_snapshot.metadata.name == "Push Day"
        assert scheduled.performance_data.metrics.adherence_score == 100

    def test_list_scheduled_soonest_first(self, session_service, stored_template):
        later = self._schedule(session_service, stored_template, NOW + timedelta(days=2))
        sooner = self._schedule(session_service, stored_template, NOW + timedelta(days=1))
        listed = session_service.list_sessions(USER_ID, SessionStatus.SCHEDULED)
        assert [s.id for s in listed] == [sooner.id, later.id]
        assert session_service.list_sessions(USER_ID, SessionStatus.COMPLETED) == []

    def test_complete_scheduled_session(self, session_service, stats_repo, stored_template):
        scheduled = self._schedule(session_service, stored_template)
        result = session_service.complete_scheduled_session(
            USER_ID, scheduled.id, LogSessionRequest(performance=bench_performance(), duration=3600), now=NOW
        )
        assert result.session.id == scheduled.id
        assert result.session.status == SessionStatus.COMPLETED
        assert result.session.scheduled_at == scheduled.scheduled_at
        assert result.session.notes == "AM"
        assert result.session.total_volume == 2470
        assert stats_repo.get_stats(USER_ID).total_training_hours == pytest.approx(1.0)

        with pytest.raises(ConflictError):
            session_service.complete_scheduled_session(
                USER_ID, scheduled.id, LogSessionRequest(performance=bench_performance()), now=NOW
            )

    def test_complete_scheduled_of_another_user(self, session_service, stored_template):
        scheduled = self._schedule(session_service, stored_template)
        with pytest.raises(SessionNotFoundError):
            session_service.complete_scheduled_session(
                OTHER_USER_ID, scheduled.id, LogSessionRequest(performance={}), now=NOW
            )

    def test_start_from_scheduled_updates_that_row(self, session_service, stored_template):
        scheduled = self._schedule(session_service, stored_template)
        session_service.start_session(
            USER_ID, _start_request(stored_template, scheduled_session_id=scheduled.id), now=NOW
        )
        result = session_service.complete_active_session(
            USER_ID, CompleteSessionRequest(performance=bench_performance()), now=NOW
        )
        assert result.session.id == scheduled.id
        assert session_service.list_sessions(USER_ID, SessionStatus.SCHEDULED) == []
        assert len(session_service.list_sessions(USER_ID, SessionStatus.COMPLETED)) == 1

    def test_log_session(self, session_service, stats_repo, stored_template):
        result = session_service.log_session(
            USER_ID,
            LogSessionRequest(template_id=stored_template.id, performance=bench_performance(), duration=1800),
            now=NOW,
        )
        assert result.session.status == SessionStatus.COMPLETED
        assert result.session.completed_at == NOW
        assert len(result.new_prs) == 2
        assert stats_repo.get_stats(USER_ID).total_workouts == 1

    def test_log_session_requires_template(self, session_service):
        with pytest.raises(PerformanceValidationError):
            session_service.log_session(USER_ID, LogSessionRequest(performance=bench_performance()))

    def test_completed_sessions_newest_first(self, session_service, stored_template):
        first = session_service.log_session(
            USER_ID, LogSessionRequest(template_id=stored_template.id, performance={}), now=NOW
        )
        second = session_service.log_session(
            USER_ID,
            LogSessionRequest(template_id=stored_template.id, performance={}),
            now=NOW + timedelta(days=1),
        )
        listed = session_service.list_sessions(USER_ID, SessionStatus.COMPLETED)
        assert [s.id for s in listed] == [second.session.id, first.session.id]
