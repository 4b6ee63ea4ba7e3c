"""Workout session document models.

Covers the performed-session document persisted on completion, the transient
active-session document and the payloads that drive the session lifecycle.
"""

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import CamelModel, ensure_aware, utcnow
from .personal_records import PRUpdate
from .templates import WorkoutTemplateData


class SessionStatus(str, Enum):
    """Lifecycle states of a workout session."""
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class PerformedSet(CamelModel):
    """What the user actually did for one set."""

    set_id: str
    actual_reps: Optional[int] = Field(None, ge=0)
    actual_weight: Optional[float] = Field(None, ge=0)
    actual_duration: Optional[float] = Field(None, ge=0)
    actual_distance: Optional[float] = Field(None, ge=0)
    actual_rpe: Optional[float] = Field(None, ge=1, le=10)
    completed: bool = False
    skipped: bool = False
    notes: Optional[str] = None
    rest_time: Optional[int] = Field(None, ge=0)

    @property
    def volume(self) -> float:
        """Weight x reps for a completed set, else 0."""
        if not self.completed:
            return 0.0
        return (self.actual_weight or 0) * (self.actual_reps or 0)


class ExercisePerformance(CamelModel):
    """Per-exercise performance within a session.

    ``total_volume`` is a cache of the completed-set volume and is
    recomputed whenever sets change.
    """

    exercise_key: str
    sets: List[PerformedSet] = Field(default_factory=list)
    exercise_notes: Optional[str] = None
    total_volume: float = 0.0
    average_rpe: Optional[float] = None


class SessionMetrics(CamelModel):
    """Aggregates derived from a session's performance map."""

    total_volume: float = 0.0
    total_sets: int = 0
    total_exercises: int = 0
    completed_sets: int = 0
    skipped_sets: int = 0
    adherence_score: int = 100
    average_rpe: Optional[float] = None
    max_rpe: Optional[float] = None
    personal_records: List[PRUpdate] = Field(default_factory=list)
    volume_records: List[PRUpdate] = Field(default_factory=list)


class WorkoutSessionData(CamelModel):
    """The session document stored alongside a session row."""

    template_snapshot: WorkoutTemplateData
    performance: Dict[str, ExercisePerformance] = Field(default_factory=dict)
    environment: Dict[str, Any] = Field(default_factory=dict)
    metrics: SessionMetrics = Field(default_factory=SessionMetrics)


class ActiveWorkoutSessionData(CamelModel):
    """In-progress session state, one per user.

    ``paused_time`` is the accumulated pause duration in seconds. While the
    timer is paused ``last_pause_time`` marks when the current pause began.
    """

    template_id: str
    template_name: str
    original_template: WorkoutTemplateData
    modified_template: Optional[WorkoutTemplateData] = None
    scheduled_session_id: Optional[str] = None
    started_at: datetime
    paused_time: int = Field(default=0, ge=0)
    is_timer_active: bool = True
    last_pause_time: Optional[datetime] = None
    performance: Dict[str, ExercisePerformance] = Field(default_factory=dict)
    exercise_progress: Dict[str, Any] = Field(default_factory=dict)
    session_notes: str = ""
    version: int = Field(default=1, ge=1)
    last_updated: datetime = Field(default_factory=utcnow)

    @field_validator("started_at", "last_pause_time", "last_updated", mode="after")
    @classmethod
    def normalize_times(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_aware(value)

    @property
    def current_template(self) -> WorkoutTemplateData:
        """The template being performed: user edits win over the original."""
        return self.modified_template or self.original_template

    def elapsed_seconds(self, now: Optional[datetime] = None) -> int:
        """Seconds of training time, excluding pauses.

        While paused the clock is read at ``last_pause_time`` so elapsed
        time does not advance.
        """
        if not self.is_timer_active and self.last_pause_time is not None:
            reference = self.last_pause_time
        else:
            reference = ensure_aware(now) or utcnow()
        since_start = math.floor((reference - self.started_at).total_seconds())
        return max(0, since_start - self.paused_time)


class ActiveSessionUpdatePayload(CamelModel):
    """Partial update to the active session. Only provided fields are merged.

    ``is_timer_active`` pauses or resumes the timer the same way the pause
    and resume operations do; the pause start is always stamped server-side.
    """

    performance: Optional[Dict[str, ExercisePerformance]] = None
    modified_template: Optional[WorkoutTemplateData] = None
    exercise_progress: Optional[Dict[str, Any]] = None
    session_notes: Optional[str] = None
    paused_time: Optional[int] = Field(None, ge=0)
    is_timer_active: Optional[bool] = None
    version: Optional[int] = Field(None, ge=1, description="Version the client last saw")


class StartSessionRequest(CamelModel):
    """Input to start an active session."""

    template_id: str
    template_name: str
    template: WorkoutTemplateData
    scheduled_session_id: Optional[str] = None
    replace: bool = Field(default=False, description="Discard an existing active session")


class RecoverSessionRequest(CamelModel):
    """Input to recover an active session after a disconnect."""

    template_id: str
    force: bool = False


class CompleteSessionRequest(CamelModel):
    """Input to complete the active session."""

    duration: Optional[int] = Field(None, ge=0, description="Seconds")
    notes: Optional[str] = None
    performance: Optional[Dict[str, ExercisePerformance]] = None
    completed_at: Optional[datetime] = None


class ScheduleSessionRequest(CamelModel):
    """Input to schedule a session for a future date."""

    template_id: str
    scheduled_at: datetime
    notes: Optional[str] = None
    environment: Dict[str, Any] = Field(default_factory=dict)


class LogSessionRequest(CamelModel):
    """Input to record an already-performed session, or finish a scheduled one."""

    template_id: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    performance: Dict[str, ExercisePerformance]
    environment: Dict[str, Any] = Field(default_factory=dict)
    completed_at: Optional[datetime] = None


class WorkoutSessionRecord(CamelModel):
    """A persisted session row (scheduled or completed)."""

    id: str
    user_id: str
    template_id: Optional[str] = None
    template_name: Optional[str] = None
    status: SessionStatus
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration: Optional[int] = None
    notes: Optional[str] = None
    performance_data: WorkoutSessionData
    total_volume: float = 0.0
    total_sets: int = 0
    total_exercises: int = 0
    personal_records: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompletionResult(CamelModel):
    """Outcome of completing a session.

    Enrichment fields are empty when the best-effort steps failed.
    """

    session: WorkoutSessionRecord
    new_prs: List[PRUpdate] = Field(default_factory=list)
    new_achievements: List[str] = Field(default_factory=list)


class ActiveSessionResponse(CamelModel):
    """Active session state together with the derived elapsed time."""

    active_session: ActiveWorkoutSessionData
    elapsed_seconds: int = 0
    recovered: bool = False
    issues: List[str] = Field(default_factory=list)
