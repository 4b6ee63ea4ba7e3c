"""
Achievement service for tiered progress tracking.

Handles:
- The fixed, versioned achievement catalog
- Mapping cumulative statistics to per-category progress
- Unlocking achievements whose requirement is met
- Achievement details with progress for display
"""

import logging
import sqlite3
from typing import Any, Dict, Iterable, List, Optional

from ..db.repositories.user_stats_repository import UserStatsRepository
from ..exceptions import EnrichmentError, ErrorCode
from ..models.achievements import (
    Achievement,
    AchievementCategory,
    AchievementUpdateResult,
    AchievementWithProgress,
    AchievementsOverview,
    UserAchievements,
    UserStatistics,
)
from ..models.base import utcnow
from ..models.personal_records import UserPersonalRecords


logger = logging.getLogger(__name__)


# =============================================================================
# Achievement Definitions
# =============================================================================

CATALOG_VERSION = 1

ACHIEVEMENT_DEFINITIONS: List[Dict[str, Any]] = [
    # Volume lifted (lbs)
    {"id": "volume_bronze", "category": "volume_lifted", "tier": "bronze", "requirement": 10_000,
     "name": "Getting Started", "description": "Lift 10,000 lbs total volume", "icon": "🏋️"},
    {"id": "volume_silver", "category": "volume_lifted", "tier": "silver", "requirement": 100_000,
     "name": "Strong Foundation", "description": "Lift 100,000 lbs total volume", "icon": "💪"},
    {"id": "volume_gold", "category": "volume_lifted", "tier": "gold", "requirement": 1_000_000,
     "name": "Power Lifter", "description": "Lift 1,000,000 lbs total volume", "icon": "🏆"},
    {"id": "volume_platinum", "category": "volume_lifted", "tier": "platinum", "requirement": 10_000_000,
     "name": "Volume Master", "description": "Lift 10,000,000 lbs total volume", "icon": "💎"},
    {"id": "volume_diamond", "category": "volume_lifted", "tier": "diamond", "requirement": 100_000_000,
     "name": "Legendary Lifter", "description": "Lift 100,000,000 lbs total volume", "icon": "👑"},
    # Workouts completed
    {"id": "workouts_bronze", "category": "workouts_completed", "tier": "bronze", "requirement": 5,
     "name": "First Steps", "description": "Complete 5 workouts", "icon": "🎯"},
    {"id": "workouts_silver", "category": "workouts_completed", "tier": "silver", "requirement": 25,
     "name": "Building Habits", "description": "Complete 25 workouts", "icon": "📈"},
    {"id": "workouts_gold", "category": "workouts_completed", "tier": "gold", "requirement": 100,
     "name": "Fitness Enthusiast", "description": "Complete 100 workouts", "icon": "🔥"},
    {"id": "workouts_platinum", "category": "workouts_completed", "tier": "platinum", "requirement": 500,
     "name": "Workout Warrior", "description": "Complete 500 workouts", "icon": "⚡"},
    {"id": "workouts_diamond", "category": "workouts_completed", "tier": "diamond", "requirement": 1000,
     "name": "Training Legend", "description": "Complete 1,000 workouts", "icon": "🌟"},
    # Unique exercises
    {"id": "exercises_bronze", "category": "unique_exercises", "tier": "bronze", "requirement": 5,
     "name": "Explorer", "description": "Try 5 different exercises", "icon": "🧭"},
    {"id": "exercises_silver", "category": "unique_exercises", "tier": "silver", "requirement": 15,
     "name": "Variety Seeker", "description": "Try 15 different exercises", "icon": "🎪"},
    {"id": "exercises_gold", "category": "unique_exercises", "tier": "gold", "requirement": 30,
     "name": "Movement Master", "description": "Try 30 different exercises", "icon": "🤸"},
    {"id": "exercises_platinum", "category": "unique_exercises", "tier": "platinum", "requirement": 75,
     "name": "Exercise Encyclopedia", "description": "Try 75 different exercises", "icon": "📚"},
    {"id": "exercises_diamond", "category": "unique_exercises", "tier": "diamond", "requirement": 100,
     "name": "Ultimate Athlete", "description": "Try 100 different exercises", "icon": "🏅"},
    # Training hours
    {"id": "hours_bronze", "category": "workout_hours", "tier": "bronze", "requirement": 10,
     "name": "Time Starter", "description": "Work out for 10 total hours", "icon": "⏰"},
    {"id": "hours_silver", "category": "workout_hours", "tier": "silver", "requirement": 50,
     "name": "Time Investor", "description": "Work out for 50 total hours", "icon": "⏳"},
    {"id": "hours_gold", "category": "workout_hours", "tier": "gold", "requirement": 200,
     "name": "Time Dedicated", "description": "Work out for 200 total hours", "icon": "🕐"},
    {"id": "hours_platinum", "category": "workout_hours", "tier": "platinum", "requirement": 500,
     "name": "Time Master", "description": "Work out for 500 total hours", "icon": "⌚"},
    {"id": "hours_diamond", "category": "workout_hours", "tier": "diamond", "requirement": 1000,
     "name": "Time Legend", "description": "Work out for 1,000 total hours", "icon": "🕰️"},
    # Daily streak
    {"id": "streak_bronze", "category": "consistency_streak", "tier": "bronze", "requirement": 3,
     "name": "Consistent Start", "description": "Maintain a 3-day workout streak", "icon": "📅"},
    {"id": "streak_silver", "category": "consistency_streak", "tier": "silver", "requirement": 7,
     "name": "Week Warrior", "description": "Maintain a 7-day workout streak", "icon": "🗓️"},
    {"id": "streak_gold", "category": "consistency_streak", "tier": "gold", "requirement": 30,
     "name": "Month Master", "description": "Maintain a 30-day workout streak", "icon": "🔗"},
    {"id": "streak_platinum", "category": "consistency_streak", "tier": "platinum", "requirement": 100,
     "name": "Unstoppable Force", "description": "Maintain a 100-day workout streak", "icon": "🚀"},
    # Personal records
    {"id": "prs_bronze", "category": "personal_records", "tier": "bronze", "requirement": 25,
     "name": "Record Setter", "description": "Set 25 personal records", "icon": "📊"},
    {"id": "prs_silver", "category": "personal_records", "tier": "silver", "requirement": 50,
     "name": "Progress Tracker", "description": "Set 50 personal records", "icon": "📈"},
    {"id": "prs_gold", "category": "personal_records", "tier": "gold", "requirement": 100,
     "name": "PR Machine", "description": "Set 100 personal records", "icon": "🎖️"},
]

ACHIEVEMENT_CATALOG: List[Achievement] = [
    Achievement.model_validate(definition) for definition in ACHIEVEMENT_DEFINITIONS
]


def get_achievement(achievement_id: str) -> Optional[Achievement]:
    """Look up a catalog entry by id."""
    for achievement in ACHIEVEMENT_CATALOG:
        if achievement.id == achievement_id:
            return achievement
    return None


def heaviest_lift(records: UserPersonalRecords) -> float:
    """Heaviest max-weight record across all exercises."""
    weights = [r.max_weight.value for r in records.values() if r.max_weight]
    return max(weights, default=0.0)


def calculate_achievement_progress(
    stats: UserStatistics,
    heaviest: float = 0.0,
) -> Dict[str, float]:
    """
    Map cumulative statistics to a progress value per category.

    Args:
        stats: The user's cumulative statistics
        heaviest: Heaviest single lift on record

    Returns:
        Dict keyed by category value
    """
    return {
        AchievementCategory.VOLUME_LIFTED.value: stats.total_volume,
        AchievementCategory.WORKOUTS_COMPLETED.value: stats.total_workouts,
        AchievementCategory.UNIQUE_EXERCISES.value: stats.unique_exercises,
        AchievementCategory.WORKOUT_HOURS.value: stats.total_training_hours,
        AchievementCategory.CONSISTENCY_STREAK.value: stats.longest_streak,
        AchievementCategory.PERSONAL_RECORDS.value: stats.personal_record_count,
        AchievementCategory.HEAVY_LIFTER.value: heaviest,
        # No statistic tracks the longest single workout yet
        AchievementCategory.ENDURANCE.value: 0,
        AchievementCategory.DEDICATION.value: stats.active_weeks,
    }


def check_unlocked_achievements(
    progress: Dict[str, float],
    unlocked: Iterable[str],
    catalog: Iterable[Achievement] = ACHIEVEMENT_CATALOG,
) -> List[str]:
    """
    Ids of achievements newly unlocked by the given progress.

    Tiers unlock independently, so a jump past several thresholds unlocks
    all of them at once. Already-unlocked ids are never re-checked.
    """
    already = set(unlocked)
    newly_unlocked: List[str] = []
    for achievement in catalog:
        if achievement.id in already:
            continue
        if progress.get(achievement.category.value, 0) >= achievement.requirement:
            newly_unlocked.append(achievement.id)
    return newly_unlocked


def progress_percentage(current: float, requirement: float) -> float:
    """Display percentage, clamped to 100."""
    if requirement <= 0:
        return 100.0
    return min(100.0, current / requirement * 100)


def apply_achievements(
    current: UserAchievements,
    progress: Dict[str, float],
    newly_unlocked: List[str],
) -> UserAchievements:
    """New achievements state: unlocked ids only ever grow, progress is refreshed."""
    return UserAchievements(
        unlocked_achievements=list(current.unlocked_achievements) + [
            a for a in newly_unlocked if a not in current.unlocked_achievements
        ],
        progress=progress,
        last_updated=utcnow(),
    )


class AchievementService:
    """Service for evaluating and reporting achievements."""

    def __init__(self, stats_repository: UserStatsRepository):
        self.stats_repository = stats_repository

    def update_user_achievements(self, user_id: str) -> AchievementUpdateResult:
        """
        Re-evaluate the catalog against the user's current statistics.

        Progress is stored even when nothing new unlocks.

        Returns:
            AchievementUpdateResult with newly unlocked ids and the total count
        """
        try:
            stats = self.stats_repository.get_stats(user_id)
            records = self.stats_repository.get_personal_records(user_id)
            current = stats.achievements

            progress = calculate_achievement_progress(stats.to_statistics(), heaviest_lift(records))
            newly = check_unlocked_achievements(progress, current.unlocked_achievements)
            updated = apply_achievements(current, progress, newly)
            self.stats_repository.save_achievements(user_id, updated)
        except sqlite3.Error as e:
            raise EnrichmentError(
                f"Failed to store achievements: {e}",
                step="achievements",
                code=ErrorCode.ACHIEVEMENT_PROCESSING_FAILED,
            ) from e

        if newly:
            logger.info(f"User {user_id} unlocked achievements: {', '.join(newly)}")

        return AchievementUpdateResult(
            new_achievements=newly,
            total_achievements=len(updated.unlocked_achievements),
        )

    def get_user_achievements(self, user_id: str) -> AchievementsOverview:
        """All catalog entries with the user's progress, grouped by category."""
        stats = self.stats_repository.get_stats(user_id)
        records = self.stats_repository.get_personal_records(user_id)
        progress = calculate_achievement_progress(stats.to_statistics(), heaviest_lift(records))
        unlocked = set(stats.achievements.unlocked_achievements)

        entries: List[AchievementWithProgress] = []
        by_category: Dict[str, List[AchievementWithProgress]] = {}
        for achievement in ACHIEVEMENT_CATALOG:
            current = progress.get(achievement.category.value, 0)
            entry = AchievementWithProgress(
                achievement=achievement,
                is_unlocked=achievement.id in unlocked,
                progress=current,
                progress_percentage=progress_percentage(current, achievement.requirement),
            )
            entries.append(entry)
            by_category.setdefault(achievement.category.value, []).append(entry)

        return AchievementsOverview(
            achievements=entries,
            by_category=by_category,
            unlocked_count=sum(1 for e in entries if e.is_unlocked),
            total_count=len(entries),
            last_updated=stats.achievements.last_updated if stats.achievements.progress else None,
            catalog_version=CATALOG_VERSION,
        )
