"""Repository pattern implementations for database persistence."""

from .base import Repository, SQLiteRepositoryMixin
from .template_repository import TemplateRepository
from .session_repository import SessionRepository
from .user_stats_repository import UserStatsRepository

__all__ = [
    "Repository",
    "SQLiteRepositoryMixin",
    "TemplateRepository",
    "SessionRepository",
    "UserStatsRepository",
]
