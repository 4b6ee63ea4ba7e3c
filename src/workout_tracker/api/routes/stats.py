"""User statistics, personal records and achievements routes."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ..deps import (
    get_achievement_service,
    get_current_user_id,
    get_pr_service,
    get_session_service,
    get_stats_repository,
)
from ...db.repositories.user_stats_repository import UserStatsRepository
from ...models.achievements import AchievementsOverview
from ...models.personal_records import ExercisePR, TopPR
from ...models.stats import MonthlyStats, UserStats
from ...services.achievement_service import AchievementService
from ...services.pr_detection_service import PRDetectionService
from ...services.session_service import SessionService


router = APIRouter()


@router.get("", response_model=UserStats)
async def get_user_stats(
    user_id: str = Depends(get_current_user_id),
    repository: UserStatsRepository = Depends(get_stats_repository),
):
    return repository.get_stats(user_id)


@router.get("/monthly", response_model=List[MonthlyStats])
async def get_monthly_stats(
    limit: int = Query(12, ge=1, le=120),
    user_id: str = Depends(get_current_user_id),
    repository: UserStatsRepository = Depends(get_stats_repository),
):
    return repository.get_monthly_stats(user_id, limit=limit)


@router.get("/personal-records", response_model=Dict[str, ExercisePR])
async def get_personal_records(
    user_id: str = Depends(get_current_user_id),
    service: PRDetectionService = Depends(get_pr_service),
):
    return service.get_user_prs(user_id)


@router.get("/personal-records/top", response_model=List[TopPR])
async def get_top_personal_records(
    limit: Optional[int] = Query(None, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    service: PRDetectionService = Depends(get_pr_service),
):
    """Most recent records first."""
    return service.get_top_prs(user_id, limit)


@router.get("/achievements", response_model=AchievementsOverview)
async def get_achievements(
    user_id: str = Depends(get_current_user_id),
    service: AchievementService = Depends(get_achievement_service),
):
    return service.get_user_achievements(user_id)


@router.post("/refresh", response_model=AchievementsOverview)
async def refresh_statistics(
    user_id: str = Depends(get_current_user_id),
    session_service: SessionService = Depends(get_session_service),
    achievement_service: AchievementService = Depends(get_achievement_service),
):
    """Recompute derived statistics and re-evaluate achievements."""
    session_service.refresh_user_statistics(user_id)
    return achievement_service.get_user_achievements(user_id)
