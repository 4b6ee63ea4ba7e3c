"""Services for workout tracking."""

from .achievement_service import (
    ACHIEVEMENT_CATALOG,
    AchievementService,
    calculate_achievement_progress,
    check_unlocked_achievements,
    progress_percentage,
)
from .pr_detection_service import (
    PRDetectionService,
    compare_to_prs,
    detect_personal_records,
    format_pr_value,
    get_top_prs,
    update_personal_records,
)
from .session_service import SessionService
from .statistics import calculate_streaks, count_active_weeks, count_unique_exercises
from .template_service import TemplateService, parse_template

__all__ = [
    # Achievements
    "ACHIEVEMENT_CATALOG",
    "AchievementService",
    "calculate_achievement_progress",
    "check_unlocked_achievements",
    "progress_percentage",
    # Personal records
    "PRDetectionService",
    "compare_to_prs",
    "detect_personal_records",
    "format_pr_value",
    "get_top_prs",
    "update_personal_records",
    # Sessions and templates
    "SessionService",
    "TemplateService",
    "parse_template",
    # Statistics
    "calculate_streaks",
    "count_active_weeks",
    "count_unique_exercises",
]
