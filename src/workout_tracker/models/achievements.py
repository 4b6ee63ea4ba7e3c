"""Achievement data models for tiered progress tracking."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from .base import CamelModel, utcnow


class AchievementCategory(str, Enum):
    """Statistic an achievement is measured against."""
    VOLUME_LIFTED = "volume_lifted"
    WORKOUTS_COMPLETED = "workouts_completed"
    UNIQUE_EXERCISES = "unique_exercises"
    WORKOUT_HOURS = "workout_hours"
    CONSISTENCY_STREAK = "consistency_streak"
    PERSONAL_RECORDS = "personal_records"
    HEAVY_LIFTER = "heavy_lifter"
    ENDURANCE = "endurance"
    DEDICATION = "dedication"


class AchievementTier(str, Enum):
    """Tier of an achievement within its category."""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"
    LEGENDARY = "legendary"


class Achievement(CamelModel):
    """Achievement definition from the fixed catalog."""

    id: str = Field(..., description="Unique achievement identifier")
    name: str = Field(..., description="Display name of the achievement")
    description: str = Field(..., description="How to unlock it")
    category: AchievementCategory
    tier: AchievementTier
    requirement: float = Field(..., gt=0, description="Statistic value needed to unlock")
    icon: str = Field(default="", description="Icon/emoji for the achievement")


class UserStatistics(CamelModel):
    """Cumulative statistics the evaluator reads."""

    total_volume: float = 0.0
    total_workouts: int = 0
    unique_exercises: int = 0
    total_training_hours: float = 0.0
    longest_streak: int = 0
    personal_record_count: int = 0
    active_weeks: int = 0


class UserAchievements(CamelModel):
    """Stored achievement state for a user. ``unlocked_achievements`` only grows."""

    unlocked_achievements: List[str] = Field(default_factory=list)
    progress: Dict[str, float] = Field(default_factory=dict)
    last_updated: datetime = Field(default_factory=utcnow)


class AchievementWithProgress(CamelModel):
    """Catalog entry annotated with the user's progress."""

    achievement: Achievement
    is_unlocked: bool = False
    progress: float = 0.0
    progress_percentage: float = Field(default=0.0, ge=0, le=100)


class AchievementUpdateResult(CamelModel):
    """Result of an achievement evaluation pass."""

    new_achievements: List[str] = Field(default_factory=list)
    total_achievements: int = 0


class AchievementsOverview(CamelModel):
    """All achievements with progress, grouped by category."""

    achievements: List[AchievementWithProgress] = Field(default_factory=list)
    by_category: Dict[str, List[AchievementWithProgress]] = Field(default_factory=dict)
    unlocked_count: int = 0
    total_count: int = 0
    last_updated: Optional[datetime] = None
    catalog_version: int = 1
