"""Cumulative and monthly user statistics."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .achievements import UserAchievements, UserStatistics
from .base import CamelModel


class UserStats(CamelModel):
    """Per-user counters maintained by session completion."""

    user_id: str
    total_workouts: int = 0
    total_volume: float = 0.0
    total_sets: int = 0
    total_exercises: int = 0
    total_training_hours: float = 0.0
    unique_exercises: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    active_weeks: int = 0
    last_workout_at: Optional[datetime] = None
    achievements: UserAchievements = Field(default_factory=UserAchievements)
    personal_record_count: int = 0

    def to_statistics(self) -> UserStatistics:
        """Project the counters onto the achievement evaluator's input."""
        return UserStatistics(
            total_volume=self.total_volume,
            total_workouts=self.total_workouts,
            unique_exercises=self.unique_exercises,
            total_training_hours=self.total_training_hours,
            longest_streak=self.longest_streak,
            personal_record_count=self.personal_record_count,
            active_weeks=self.active_weeks,
        )


class MonthlyStats(CamelModel):
    """Aggregates for one user and calendar month."""

    user_id: str
    year: int
    month: int = Field(..., ge=1, le=12)
    workouts_count: int = 0
    total_volume: float = 0.0
    total_training_hours: float = 0.0
