"""Dependency injection for API routes."""

from functools import lru_cache

from fastapi import Header, HTTPException

from ..config import get_settings
from ..db.database import Database
from ..db.repositories.session_repository import SessionRepository
from ..db.repositories.template_repository import TemplateRepository
from ..db.repositories.user_stats_repository import UserStatsRepository
from ..services.achievement_service import AchievementService
from ..services.pr_detection_service import PRDetectionService
from ..services.session_service import SessionService
from ..services.template_service import TemplateService


@lru_cache
def get_database() -> Database:
    """Get the database instance."""
    settings = get_settings()
    return Database(str(settings.database_path) if settings.database_path else None)


@lru_cache
def get_template_repository() -> TemplateRepository:
    return TemplateRepository(get_database())


@lru_cache
def get_session_repository() -> SessionRepository:
    return SessionRepository(get_database())


@lru_cache
def get_stats_repository() -> UserStatsRepository:
    return UserStatsRepository(get_database())


@lru_cache
def get_template_service() -> TemplateService:
    """Get the template service instance."""
    settings = get_settings()
    return TemplateService(
        get_template_repository(),
        default_rest_seconds=settings.default_rest_seconds,
        warmup_buffer_minutes=settings.warmup_buffer_minutes,
    )


@lru_cache
def get_pr_service() -> PRDetectionService:
    return PRDetectionService(get_stats_repository(), top_prs_limit=get_settings().top_prs_limit)


@lru_cache
def get_achievement_service() -> AchievementService:
    return AchievementService(get_stats_repository())


@lru_cache
def get_session_service() -> SessionService:
    """Get the session lifecycle service instance."""
    return SessionService(
        database=get_database(),
        template_repository=get_template_repository(),
        session_repository=get_session_repository(),
        stats_repository=get_stats_repository(),
        pr_service=get_pr_service(),
        achievement_service=get_achievement_service(),
    )


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """
    Resolve the calling user from the ``X-User-Id`` header.

    Authentication happens upstream; every query is scoped by this id.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()
