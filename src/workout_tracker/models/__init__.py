"""Document models for templates, sessions, records and achievements."""

from .base import CamelModel, ensure_aware, utcnow
from .templates import (
    Difficulty,
    SetType,
    TemplateBuildRequest,
    TemplateExerciseInput,
    TemplateMetadata,
    TemplateSetInput,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplateData,
    WorkoutTemplateRecord,
    WorkoutType,
    is_valid_template,
)
from .sessions import (
    ActiveSessionResponse,
    ActiveSessionUpdatePayload,
    ActiveWorkoutSessionData,
    CompleteSessionRequest,
    CompletionResult,
    ExercisePerformance,
    LogSessionRequest,
    PerformedSet,
    RecoverSessionRequest,
    ScheduleSessionRequest,
    SessionMetrics,
    SessionStatus,
    StartSessionRequest,
    WorkoutSessionData,
    WorkoutSessionRecord,
)
from .personal_records import (
    ExercisePR,
    MaxVolumeRecord,
    MaxWeightRecord,
    PRComparison,
    PRProcessingResult,
    PRType,
    PRUpdate,
    TopPR,
    UserPersonalRecords,
)
from .achievements import (
    Achievement,
    AchievementCategory,
    AchievementTier,
    AchievementUpdateResult,
    AchievementWithProgress,
    AchievementsOverview,
    UserAchievements,
    UserStatistics,
)
from .stats import MonthlyStats, UserStats

__all__ = [
    "CamelModel",
    "ensure_aware",
    "utcnow",
    # Templates
    "Difficulty",
    "SetType",
    "TemplateBuildRequest",
    "TemplateExerciseInput",
    "TemplateMetadata",
    "TemplateSetInput",
    "WorkoutExercise",
    "WorkoutSet",
    "WorkoutTemplateData",
    "WorkoutTemplateRecord",
    "WorkoutType",
    "is_valid_template",
    # Sessions
    "ActiveSessionResponse",
    "ActiveSessionUpdatePayload",
    "ActiveWorkoutSessionData",
    "CompleteSessionRequest",
    "CompletionResult",
    "ExercisePerformance",
    "LogSessionRequest",
    "PerformedSet",
    "RecoverSessionRequest",
    "ScheduleSessionRequest",
    "SessionMetrics",
    "SessionStatus",
    "StartSessionRequest",
    "WorkoutSessionData",
    "WorkoutSessionRecord",
    # Personal records
    "ExercisePR",
    "MaxVolumeRecord",
    "MaxWeightRecord",
    "PRComparison",
    "PRProcessingResult",
    "PRType",
    "PRUpdate",
    "TopPR",
    "UserPersonalRecords",
    # Achievements
    "Achievement",
    "AchievementCategory",
    "AchievementTier",
    "AchievementUpdateResult",
    "AchievementWithProgress",
    "AchievementsOverview",
    "UserAchievements",
    "UserStatistics",
    # Stats
    "MonthlyStats",
    "UserStats",
]
