"""Shared fixtures for workout tracker tests."""

import os
import tempfile

import pytest

from workout_tracker.db.database import Database
from workout_tracker.db.repositories import (
    SessionRepository,
    TemplateRepository,
    UserStatsRepository,
)
from workout_tracker.models.templates import WorkoutTemplateData
from workout_tracker.services.achievement_service import AchievementService
from workout_tracker.services.pr_detection_service import PRDetectionService
from workout_tracker.services.session_service import SessionService
from workout_tracker.services.template_service import TemplateService

from helpers import USER_ID, bench_template_dict


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    db = Database(db_path)
    yield db

    try:
        os.unlink(db_path)
    except OSError:
        pass

@pytest.fixture
def template_repo(temp_db):
    return TemplateRepository(temp_db)

@pytest.fixture
def session_repo(temp_db):
    return SessionRepository(temp_db)

@pytest.fixture
def stats_repo(temp_db):
    return UserStatsRepository(temp_db)

@pytest.fixture
def pr_service(stats_repo):
    return PRDetectionService(stats_repo)

@pytest.fixture
def achievement_service(stats_repo):
    return AchievementService(stats_repo)

@pytest.fixture
def template_service(template_repo):
    return TemplateService(template_repo)

@pytest.fixture
def session_service(temp_db, template_repo, session_repo, stats_repo, pr_service, achievement_service):
    return SessionService(
        database=temp_db,
        template_repository=template_repo,
        session_repository=session_repo,
        stats_repository=stats_repo,
        pr_service=pr_service,
        achievement_service=achievement_service,
    )

@pytest.fixture
def bench_template() -> WorkoutTemplateData:
    return WorkoutTemplateData.model_validate(bench_template_dict())

@pytest.fixture
def stored_template(template_service):
    """A Bench Press template owned by USER_ID."""
    return template_service.create_template(USER_ID, bench_template_dict())
