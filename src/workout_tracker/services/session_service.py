"""
Workout session lifecycle service.

Moves sessions between scheduled, active and completed:
- Scheduling a session against a template snapshot
- Starting, updating, pausing/resuming, recovering and ending the active session
- Completing a session inside one transaction (session row, user counters,
  clearing the active session and monthly aggregates)
- Best-effort enrichment after the transaction: personal records, derived
  statistics and achievements. Enrichment failures are logged, never raised.
"""

import logging
import math
import sqlite3
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..db.database import Database
from ..db.repositories.session_repository import SessionRepository
from ..db.repositories.template_repository import TemplateRepository
from ..db.repositories.user_stats_repository import UserStatsRepository
from ..exceptions import (
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
from ..metrics.session import (
    PerformanceMap,
    convert_exercise_progress_to_performance,
    create_workout_session,
    recalculate_performance_map,
)
from ..models.base import ensure_aware, format_validation_errors, utcnow
from ..models.personal_records import PRType, PRUpdate
from ..models.sessions import (
    ActiveSessionResponse,
    ActiveSessionUpdatePayload,
    ActiveWorkoutSessionData,
    CompleteSessionRequest,
    CompletionResult,
    LogSessionRequest,
    RecoverSessionRequest,
    ScheduleSessionRequest,
    SessionStatus,
    StartSessionRequest,
    WorkoutSessionData,
    WorkoutSessionRecord,
)
from ..models.templates import WorkoutTemplateData
from .achievement_service import AchievementService
from .pr_detection_service import PRDetectionService
from .statistics import calculate_streaks, count_active_weeks, count_unique_exercises


logger = logging.getLogger(__name__)

# Update fields a client may explicitly clear
NULLABLE_UPDATE_FIELDS = frozenset({"modified_template"})

# Applied after the other fields so a pause or resume sees the merged paused_time
TIMER_UPDATE_FIELDS = frozenset({"is_timer_active"})


def _pause_changes(current: ActiveWorkoutSessionData, now: datetime) -> dict:
    if not current.is_timer_active:
        return {}
    return {"is_timer_active": False, "last_pause_time": now}


def _resume_changes(current: ActiveWorkoutSessionData, now: datetime) -> dict:
    """Fold the pause that just ended into ``paused_time``."""
    if current.is_timer_active:
        return {}
    paused = 0
    if current.last_pause_time is not None:
        paused = max(0, math.floor((now - current.last_pause_time).total_seconds()))
    return {
        "is_timer_active": True,
        "last_pause_time": None,
        "paused_time": current.paused_time + paused,
    }


class SessionService:
    """Service for the workout session lifecycle."""

    def __init__(
        self,
        database: Database,
        template_repository: TemplateRepository,
        session_repository: SessionRepository,
        stats_repository: UserStatsRepository,
        pr_service: PRDetectionService,
        achievement_service: AchievementService,
    ):
        self.database = database
        self.template_repository = template_repository
        self.session_repository = session_repository
        self.stats_repository = stats_repository
        self.pr_service = pr_service
        self.achievement_service = achievement_service

    # =========================================================================
    # Scheduled and completed sessions
    # =========================================================================

    def _require_template(self, user_id: str, template_id: str):
        template = self.template_repository.get_for_user(template_id, user_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def _require_session(self, user_id: str, session_id: str) -> WorkoutSessionRecord:
        session = self.session_repository.get_for_user(session_id, user_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def create_scheduled_session(
        self,
        user_id: str,
        request: ScheduleSessionRequest,
    ) -> WorkoutSessionRecord:
        """Schedule a session; the template is snapshotted now with zero metrics."""
        template = self._require_template(user_id, request.template_id)
        session_data = create_workout_session(
            template.template_data, {}, request.environment
        )
        record = WorkoutSessionRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            template_id=template.id,
            template_name=template.name,
            status=SessionStatus.SCHEDULED,
            scheduled_at=ensure_aware(request.scheduled_at),
            notes=request.notes,
            performance_data=session_data,
        )
        saved = self.session_repository.save(record)
        logger.info(f"Scheduled session {saved.id} for user {user_id}")
        return saved

    def get_session(self, user_id: str, session_id: str) -> WorkoutSessionRecord:
        return self._require_session(user_id, session_id)

    def list_sessions(
        self,
        user_id: str,
        status: SessionStatus,
        limit: int = 50,
        offset: int = 0,
    ) -> List[WorkoutSessionRecord]:
        return self.session_repository.get_all(
            limit=limit, offset=offset, user_id=user_id, status=status
        )

    def complete_scheduled_session(
        self,
        user_id: str,
        session_id: str,
        request: LogSessionRequest,
        now: Optional[datetime] = None,
    ) -> CompletionResult:
        """Complete a scheduled session directly from a performance map."""
        scheduled = self._require_session(user_id, session_id)
        if scheduled.status != SessionStatus.SCHEDULED:
            raise ConflictError(
                "Only scheduled sessions can be completed",
                details={"status": scheduled.status.value},
            )

        snapshot = scheduled.performance_data.template_snapshot
        environment = {**scheduled.performance_data.environment, **request.environment}
        record = self._build_completed_record(
            user_id=user_id,
            session_id=scheduled.id,
            template_id=scheduled.template_id,
            template_name=scheduled.template_name,
            snapshot=snapshot,
            performance=request.performance,
            environment=environment,
            duration=request.duration or 0,
            notes=request.notes if request.notes is not None else scheduled.notes,
            completed_at=ensure_aware(request.completed_at) or ensure_aware(now) or utcnow(),
            scheduled_at=scheduled.scheduled_at,
            created_at=scheduled.created_at,
        )
        return self._complete(user_id, record, clear_active_version=None)

    def log_session(
        self,
        user_id: str,
        request: LogSessionRequest,
        now: Optional[datetime] = None,
    ) -> CompletionResult:
        """Record an already-performed session without going through the active state."""
        if not request.template_id:
            raise PerformanceValidationError("templateId is required", field="templateId")
        template = self._require_template(user_id, request.template_id)

        record = self._build_completed_record(
            user_id=user_id,
            session_id=str(uuid.uuid4()),
            template_id=template.id,
            template_name=template.name,
            snapshot=template.template_data,
            performance=request.performance,
            environment=request.environment,
            duration=request.duration or 0,
            notes=request.notes,
            completed_at=ensure_aware(request.completed_at) or ensure_aware(now) or utcnow(),
        )
        return self._complete(user_id, record, clear_active_version=None)

    # =========================================================================
    # Active session
    # =========================================================================

    def _response(
        self,
        data: ActiveWorkoutSessionData,
        now: Optional[datetime] = None,
        recovered: bool = False,
        issues: Optional[List[str]] = None,
    ) -> ActiveSessionResponse:
        return ActiveSessionResponse(
            active_session=data,
            elapsed_seconds=data.elapsed_seconds(now),
            recovered=recovered,
            issues=issues or [],
        )

    def _new_active_session(
        self,
        template_id: str,
        template_name: str,
        template: WorkoutTemplateData,
        started_at: datetime,
        scheduled_session_id: Optional[str] = None,
    ) -> ActiveWorkoutSessionData:
        return ActiveWorkoutSessionData(
            template_id=template_id,
            template_name=template_name,
            original_template=template.snapshot(),
            scheduled_session_id=scheduled_session_id,
            started_at=started_at,
            paused_time=0,
            is_timer_active=True,
            session_notes="",
            version=1,
            last_updated=started_at,
        )

    def get_active_session(self, user_id: str) -> ActiveWorkoutSessionData:
        data = self.stats_repository.get_active_session(user_id)
        if data is None:
            raise ActiveSessionNotFoundError(user_id)
        return data

    def get_active_session_state(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> ActiveSessionResponse:
        return self._response(self.get_active_session(user_id), now)

    def start_session(
        self,
        user_id: str,
        request: StartSessionRequest,
        now: Optional[datetime] = None,
    ) -> ActiveSessionResponse:
        """
        Start the user's active session.

        When ``scheduled_session_id`` is given the scheduled session's own
        snapshot is reused and completion later updates that row.

        Raises:
            ActiveSessionExistsError: If a session is active and ``replace`` is False
            TemplateNotFoundError: If the template is absent or not owned
            SessionNotFoundError: If the scheduled session is absent or not owned
        """
        now = ensure_aware(now) or utcnow()

        if request.scheduled_session_id:
            scheduled = self._require_session(user_id, request.scheduled_session_id)
            if scheduled.status != SessionStatus.SCHEDULED:
                raise SessionNotFoundError(request.scheduled_session_id)
            data = self._new_active_session(
                template_id=scheduled.template_id or request.template_id,
                template_name=scheduled.template_name or request.template_name,
                template=scheduled.performance_data.template_snapshot,
                started_at=now,
                scheduled_session_id=scheduled.id,
            )
        else:
            self._require_template(user_id, request.template_id)
            data = self._new_active_session(
                template_id=request.template_id,
                template_name=request.template_name,
                template=request.template,
                started_at=now,
            )

        existing = self.stats_repository.get_active_session(user_id)
        if existing is not None:
            if not request.replace:
                raise ActiveSessionExistsError(existing.template_id)
            if not self.stats_repository.replace_active_session(user_id, data, existing.version):
                raise SessionVersionConflictError(existing.version, self._current_version(user_id))
            logger.info(f"Replaced active session for user {user_id} (template {data.template_id})")
        elif not self.stats_repository.create_active_session(user_id, data):
            current = self.stats_repository.get_active_session(user_id)
            raise ActiveSessionExistsError(current.template_id if current else request.template_id)
        else:
            logger.info(f"Started active session for user {user_id} (template {data.template_id})")

        return self._response(data, now)

    def _current_version(self, user_id: str) -> int:
        current = self.stats_repository.get_active_session(user_id)
        return current.version if current else 0

    def _mutate(
        self,
        user_id: str,
        expected_version: Optional[int],
        mutate: Callable[[ActiveWorkoutSessionData], dict],
        now: datetime,
    ) -> ActiveWorkoutSessionData:
        """
        Apply a change to the active session as a compare-and-swap.

        ``mutate`` returns the fields to update. The stored version must
        match both the caller's expected version (when given) and the
        version read here, otherwise SessionVersionConflictError is raised.
        """
        current = self.get_active_session(user_id)
        if expected_version is not None and expected_version != current.version:
            raise SessionVersionConflictError(expected_version, current.version)

        changes = mutate(current)
        changes.update({"version": current.version + 1, "last_updated": now})
        try:
            updated = ActiveWorkoutSessionData.model_validate(
                {**current.model_dump(), **changes}
            )
        except PydanticValidationError as e:
            raise PerformanceValidationError(
                "Invalid active session update",
                details={"errors": format_validation_errors(e)},
            ) from e

        if not self.stats_repository.replace_active_session(user_id, updated, current.version):
            raise SessionVersionConflictError(
                expected_version if expected_version is not None else current.version,
                self._current_version(user_id),
            )
        return updated

    def update_active_session(
        self,
        user_id: str,
        payload: ActiveSessionUpdatePayload,
        now: Optional[datetime] = None,
    ) -> ActiveSessionResponse:
        """Merge the provided fields into the active session and bump its version."""
        now = ensure_aware(now) or utcnow()
        provided = payload.model_fields_set - {"version"}

        def merge(current: ActiveWorkoutSessionData) -> dict:
            changes = {}
            for field in provided - TIMER_UPDATE_FIELDS:
                value = getattr(payload, field)
                if value is None and field not in NULLABLE_UPDATE_FIELDS:
                    continue
                if field == "performance" and value is not None:
                    value = recalculate_performance_map(value)
                changes[field] = value

            if payload.is_timer_active is not None:
                merged = current.model_copy(update=changes)
                if payload.is_timer_active:
                    changes.update(_resume_changes(merged, now))
                else:
                    changes.update(_pause_changes(merged, now))
            return changes

        updated = self._mutate(user_id, payload.version, merge, now)
        return self._response(updated, now)

    def pause_session(
        self,
        user_id: str,
        version: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ActiveSessionResponse:
        """Stop the timer. Pausing an already paused session changes nothing but the version."""
        now = ensure_aware(now) or utcnow()

        def pause(current: ActiveWorkoutSessionData) -> dict:
            return _pause_changes(current, now)

        return self._response(self._mutate(user_id, version, pause, now), now)

    def resume_session(
        self,
        user_id: str,
        version: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ActiveSessionResponse:
        """Restart the timer, folding the pause that just ended into ``paused_time``."""
        now = ensure_aware(now) or utcnow()

        def resume(current: ActiveWorkoutSessionData) -> dict:
            return _resume_changes(current, now)

        return self._response(self._mutate(user_id, version, resume, now), now)

    def toggle_timer(
        self,
        user_id: str,
        version: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> ActiveSessionResponse:
        current = self.get_active_session(user_id)
        if current.is_timer_active:
            return self.pause_session(user_id, version, now)
        return self.resume_session(user_id, version, now)

    def recover_session(
        self,
        user_id: str,
        request: RecoverSessionRequest,
        now: Optional[datetime] = None,
    ) -> ActiveSessionResponse:
        """
        Resume the stored active session after a client reconnects.

        A session for the same template with intact data resumes with its
        version bumped. Otherwise SessionRecoveryConflictError lists the
        issues, unless ``force`` is set, in which case the stored session is
        discarded and a fresh one is started from the requested template.
        Two unrelated sessions are never merged.
        """
        now = ensure_aware(now) or utcnow()
        stored = self.stats_repository.get_active_session_document(user_id)
        if stored is None:
            raise ActiveSessionNotFoundError(user_id)
        document, stored_version = stored

        issues: List[str] = []
        current: Optional[ActiveWorkoutSessionData] = None
        try:
            current = ActiveWorkoutSessionData.model_validate(document)
        except PydanticValidationError as e:
            for error in format_validation_errors(e):
                issues.append(f"Invalid session data at {error['field']}: {error['message']}")

        template = self.template_repository.get_for_user(request.template_id, user_id)
        if template is None:
            issues.append("Template no longer exists or is not accessible")
        stored_template_id = current.template_id if current else document.get("templateId")
        if stored_template_id != request.template_id:
            issues.append(
                f"Template ID mismatch: expected {request.template_id}, found {stored_template_id}"
            )

        if not issues:
            recovered = self._mutate(user_id, None, lambda _: {}, now)
            logger.info(f"Recovered active session for user {user_id}")
            return self._response(recovered, now, recovered=True)

        if not request.force:
            raise SessionRecoveryConflictError(issues, can_recover=template is not None)

        # Forced: discard the stored session and start over from the requested template
        self.stats_repository.clear_active_session(user_id, expected_version=stored_version)
        if template is None:
            raise TemplateNotFoundError(request.template_id, details={"issues": issues})

        data = self._new_active_session(
            template_id=template.id,
            template_name=template.name,
            template=template.template_data,
            started_at=now,
        )
        if not self.stats_repository.create_active_session(user_id, data):
            raise SessionVersionConflictError(stored_version, self._current_version(user_id))
        logger.warning(f"Force-recovered active session for user {user_id}: {'; '.join(issues)}")
        return self._response(data, now, recovered=True, issues=issues)

    def end_session(self, user_id: str) -> None:
        """Abandon the active session. No metrics, records or statistics are touched."""
        if not self.stats_repository.clear_active_session(user_id):
            raise ActiveSessionNotFoundError(user_id)
        logger.info(f"Ended active session for user {user_id}")

    def complete_active_session(
        self,
        user_id: str,
        request: CompleteSessionRequest,
        now: Optional[datetime] = None,
    ) -> CompletionResult:
        """
        Complete the active session.

        Uses the request's performance when given, else the session's own
        performance, else its exercise progress converted to performance.
        Without an explicit duration the elapsed timer value is used.
        """
        now = ensure_aware(now) or utcnow()
        active = self.get_active_session(user_id)
        template = active.current_template

        performance: PerformanceMap = dict(
            request.performance if request.performance is not None else active.performance
        )
        if request.performance is None and not performance and active.exercise_progress:
            performance = convert_exercise_progress_to_performance(
                active.exercise_progress, template
            )

        duration = request.duration if request.duration is not None else active.elapsed_seconds(now)
        completed_at = ensure_aware(request.completed_at) or now
        notes = request.notes if request.notes is not None else (active.session_notes or None)

        scheduled: Optional[WorkoutSessionRecord] = None
        if active.scheduled_session_id:
            scheduled = self.session_repository.get_for_user(active.scheduled_session_id, user_id)
            if scheduled is not None and scheduled.status != SessionStatus.SCHEDULED:
                scheduled = None

        record = self._build_completed_record(
            user_id=user_id,
            session_id=scheduled.id if scheduled else str(uuid.uuid4()),
            template_id=active.template_id,
            template_name=active.template_name,
            snapshot=template,
            performance=performance,
            environment=scheduled.performance_data.environment if scheduled else {},
            duration=duration,
            notes=notes,
            completed_at=completed_at,
            scheduled_at=scheduled.scheduled_at if scheduled else None,
            created_at=scheduled.created_at if scheduled else None,
        )
        return self._complete(user_id, record, clear_active_version=active.version)

    # =========================================================================
    # Completion pipeline
    # =========================================================================

    def _build_completed_record(
        self,
        user_id: str,
        session_id: str,
        template_id: Optional[str],
        template_name: Optional[str],
        snapshot: WorkoutTemplateData,
        performance: PerformanceMap,
        environment: dict,
        duration: int,
        notes: Optional[str],
        completed_at: datetime,
        scheduled_at: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
    ) -> WorkoutSessionRecord:
        session_data = create_workout_session(snapshot, performance, environment)
        metrics = session_data.metrics
        return WorkoutSessionRecord(
            id=session_id,
            user_id=user_id,
            template_id=template_id,
            template_name=template_name,
            status=SessionStatus.COMPLETED,
            scheduled_at=scheduled_at,
            completed_at=completed_at,
            duration=duration,
            notes=notes,
            performance_data=session_data,
            total_volume=metrics.total_volume,
            total_sets=metrics.total_sets,
            total_exercises=metrics.total_exercises,
            created_at=created_at,
        )

    def _commit_completion(
        self,
        user_id: str,
        record: WorkoutSessionRecord,
        clear_active_version: Optional[int],
    ) -> WorkoutSessionRecord:
        """Write the session, the counters, the active-session removal and the monthly row atomically."""
        metrics = record.performance_data.metrics
        hours = (record.duration or 0) / 3600
        completed_at = record.completed_at or utcnow()

        try:
            with self.database.connection() as conn:
                saved = self.session_repository.save(record, conn=conn)
                self.stats_repository.increment_completion(
                    user_id,
                    volume=metrics.total_volume,
                    sets=metrics.total_sets,
                    exercises=metrics.total_exercises,
                    training_hours=hours,
                    completed_at=completed_at,
                    conn=conn,
                )
                if clear_active_version is not None:
                    cleared = self.stats_repository.clear_active_session(
                        user_id, expected_version=clear_active_version, conn=conn
                    )
                    if not cleared:
                        current = self.stats_repository.get_active_session(user_id, conn=conn)
                        raise SessionVersionConflictError(
                            clear_active_version, current.version if current else 0
                        )
                self.stats_repository.upsert_monthly_stats(
                    user_id,
                    year=completed_at.year,
                    month=completed_at.month,
                    volume=metrics.total_volume,
                    training_hours=hours,
                    conn=conn,
                )
        except sqlite3.Error as e:
            logger.error(f"Failed to complete session {record.id} for user {user_id}: {e}")
            raise DatabaseError("Failed to save completed workout", operation="complete_session") from e

        logger.info(
            f"Completed session {saved.id} for user {user_id}: "
            f"volume={metrics.total_volume}, sets={metrics.total_sets}"
        )
        return saved

    def _complete(
        self,
        user_id: str,
        record: WorkoutSessionRecord,
        clear_active_version: Optional[int],
    ) -> CompletionResult:
        saved = self._commit_completion(user_id, record, clear_active_version)
        saved, new_prs = self._process_personal_records(user_id, saved)
        self._refresh_derived_stats(user_id)
        new_achievements = self._process_achievements(user_id)
        return CompletionResult(session=saved, new_prs=new_prs, new_achievements=new_achievements)

    def _process_personal_records(
        self,
        user_id: str,
        record: WorkoutSessionRecord,
    ) -> Tuple[WorkoutSessionRecord, List[PRUpdate]]:
        """
        Detect records for a committed session. Failures are logged and ignored.

        Records already stored are reported even if annotating the session
        row with them fails afterwards.
        """
        try:
            result = self.pr_service.process_session_prs(user_id, record.id, record.performance_data)
        except Exception as e:
            logger.error(
                f"Failed to process personal records for session {record.id} "
                f"(user {user_id}): {e}"
            )
            return record, []
        if not result.new_prs:
            return record, []

        try:
            metrics = record.performance_data.metrics.model_copy(update={
                "personal_records": [p for p in result.new_prs if p.type == PRType.MAX_WEIGHT],
                "volume_records": [p for p in result.new_prs if p.type == PRType.MAX_VOLUME],
            })
            data: WorkoutSessionData = record.performance_data.model_copy(update={"metrics": metrics})
            updated = record.model_copy(update={
                "performance_data": data,
                "personal_records": len(result.new_prs),
            })
            return self.session_repository.save(updated), result.new_prs
        except Exception as e:
            logger.error(
                f"Failed to attach personal records to session {record.id} "
                f"(user {user_id}): {e}"
            )
            return record, result.new_prs

    def _refresh_derived_stats(self, user_id: str) -> None:
        """Recompute unique exercises, streaks and active weeks. Failures are logged and ignored."""
        try:
            dates = self.session_repository.get_completed_dates(user_id)
            keys = self.session_repository.get_completed_exercise_keys(user_id)
            current_streak, longest_streak = calculate_streaks(dates)
            self.stats_repository.update_derived_stats(
                user_id,
                unique_exercises=count_unique_exercises(keys),
                current_streak=current_streak,
                longest_streak=longest_streak,
                active_weeks=count_active_weeks(dates),
            )
        except Exception as e:
            logger.error(f"Failed to refresh statistics for user {user_id}: {e}")

    def _process_achievements(self, user_id: str) -> List[str]:
        """Evaluate achievements. Failures are logged and ignored."""
        try:
            return self.achievement_service.update_user_achievements(user_id).new_achievements
        except Exception as e:
            logger.error(f"Failed to update achievements for user {user_id}: {e}")
            return []

    def refresh_user_statistics(self, user_id: str) -> List[str]:
        """Recompute derived statistics and achievements on demand."""
        self._refresh_derived_stats(user_id)
        return self._process_achievements(user_id)
