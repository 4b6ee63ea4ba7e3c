"""Workout tracking: templates, session lifecycle, metrics, personal records and achievements."""

from .db.database import Database
from .metrics import calculate_session_metrics, create_workout_session, create_workout_template
from .services.achievement_service import ACHIEVEMENT_CATALOG, AchievementService
from .services.pr_detection_service import PRDetectionService, detect_personal_records
from .services.session_service import SessionService
from .services.template_service import TemplateService

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Database
    "Database",
    # Metrics
    "calculate_session_metrics",
    "create_workout_session",
    "create_workout_template",
    # Services
    "ACHIEVEMENT_CATALOG",
    "AchievementService",
    "PRDetectionService",
    "SessionService",
    "TemplateService",
    "detect_personal_records",
]
