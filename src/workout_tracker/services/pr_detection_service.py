"""Personal Record (PR) detection service.

This service handles:
- Detection of new max-weight and max-volume records from a session
- Applying detected records to the user's stored records
- Comparison of a session's performance to existing records
- Retrieval of the most recent records for display
"""

import logging
import sqlite3
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..db.repositories.user_stats_repository import UserStatsRepository
from ..exceptions import EnrichmentError
from ..models.base import utcnow
from ..models.personal_records import (
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
from ..models.sessions import PerformedSet, WorkoutSessionData

logger = logging.getLogger(__name__)


def _eligible_sets(performed_sets: Sequence[PerformedSet]) -> List[PerformedSet]:
    """Completed sets that carry both a weight and a rep count."""
    return [
        s for s in performed_sets
        if s.completed and s.actual_weight and s.actual_reps
    ]


def detect_personal_records(
    exercise_name: str,
    performed_sets: Sequence[PerformedSet],
    current_prs: UserPersonalRecords,
    session_id: str,
) -> List[PRUpdate]:
    """
    Detect new personal records for one exercise in a session.

    Args:
        exercise_name: Display name the records are keyed by
        performed_sets: The sets performed for the exercise
        current_prs: The user's stored records
        session_id: Session the sets belong to

    Returns:
        Zero, one or two PRUpdate events (max weight and/or max volume)
    """
    sets = _eligible_sets(performed_sets)
    if not sets:
        return []

    existing = current_prs.get(exercise_name) or ExercisePR()
    new_prs: List[PRUpdate] = []

    # Heaviest set; on equal weight the first one performed wins
    heaviest = sets[0]
    for candidate in sets[1:]:
        if candidate.actual_weight > heaviest.actual_weight:
            heaviest = candidate

    previous_weight = existing.max_weight.value if existing.max_weight else None
    if previous_weight is None or heaviest.actual_weight > previous_weight:
        new_prs.append(PRUpdate(
            exercise_name=exercise_name,
            type=PRType.MAX_WEIGHT,
            value=heaviest.actual_weight,
            reps=heaviest.actual_reps,
            session_id=session_id,
            previous_best=previous_weight,
        ))

    total_volume = sum(s.actual_weight * s.actual_reps for s in sets)
    total_reps = sum(s.actual_reps for s in sets)
    previous_volume = existing.max_volume.value if existing.max_volume else None
    if previous_volume is None or total_volume > previous_volume:
        new_prs.append(PRUpdate(
            exercise_name=exercise_name,
            type=PRType.MAX_VOLUME,
            value=total_volume,
            sets=len(sets),
            avg_weight=total_volume / total_reps,
            session_id=session_id,
            previous_best=previous_volume,
        ))

    return new_prs


def update_personal_records(
    current_prs: UserPersonalRecords,
    new_prs: Sequence[PRUpdate],
    achieved_at: Optional[datetime] = None,
) -> UserPersonalRecords:
    """
    Apply PR events to a copy of the user's records.

    A field is replaced, never merged, and only when the new value beats
    the stored one, so applying stale events cannot lower a record.
    """
    achieved_at = achieved_at or utcnow()
    updated: Dict[str, ExercisePR] = {
        name: record.model_copy(deep=True) for name, record in current_prs.items()
    }

    for pr in new_prs:
        record = updated.setdefault(pr.exercise_name, ExercisePR())

        if pr.type == PRType.MAX_WEIGHT:
            if record.max_weight is not None and pr.value <= record.max_weight.value:
                continue
            record.max_weight = MaxWeightRecord(
                value=pr.value,
                reps=pr.reps or 1,
                achieved_at=achieved_at,
                session_id=pr.session_id,
            )
        elif pr.type == PRType.MAX_VOLUME:
            if record.max_volume is not None and pr.value <= record.max_volume.value:
                continue
            record.max_volume = MaxVolumeRecord(
                value=pr.value,
                achieved_at=achieved_at,
                session_id=pr.session_id,
                sets=pr.sets or 1,
                avg_weight=pr.avg_weight if pr.avg_weight is not None else pr.value,
            )

    return updated


def _improvement(pr_type: PRType, value: float, previous: float) -> PRComparison:
    improvement = value - previous
    return PRComparison(
        is_new_pr=True,
        type=pr_type,
        improvement=improvement,
        improvement_percent=(improvement / previous * 100) if previous > 0 else 100.0,
        previous_best=previous,
    )


def compare_to_prs(
    exercise_name: str,
    performed_sets: Sequence[PerformedSet],
    current_prs: UserPersonalRecords,
) -> List[PRComparison]:
    """
    Compare a session's sets against the stored records for an exercise.

    Returns nothing when the exercise has no stored records yet.
    """
    existing = current_prs.get(exercise_name)
    if existing is None:
        return []

    sets = _eligible_sets(performed_sets)
    if not sets:
        return []

    comparisons: List[PRComparison] = []

    max_weight = max(s.actual_weight for s in sets)
    stored_weight = existing.max_weight.value if existing.max_weight else 0.0
    if max_weight > stored_weight:
        comparisons.append(_improvement(PRType.MAX_WEIGHT, max_weight, stored_weight))

    total_volume = sum(s.actual_weight * s.actual_reps for s in sets)
    stored_volume = existing.max_volume.value if existing.max_volume else 0.0
    if total_volume > stored_volume:
        comparisons.append(_improvement(PRType.MAX_VOLUME, total_volume, stored_volume))

    return comparisons


def get_top_prs(records: UserPersonalRecords, limit: int = 10) -> List[TopPR]:
    """Flatten records and return the most recently achieved first."""
    flattened: List[TopPR] = []
    for name, record in records.items():
        if record.max_weight:
            flattened.append(TopPR(
                exercise_name=name,
                type=PRType.MAX_WEIGHT,
                value=record.max_weight.value,
                achieved_at=record.max_weight.achieved_at,
                reps=record.max_weight.reps,
            ))
        if record.max_volume:
            flattened.append(TopPR(
                exercise_name=name,
                type=PRType.MAX_VOLUME,
                value=record.max_volume.value,
                achieved_at=record.max_volume.achieved_at,
                sets=record.max_volume.sets,
            ))

    flattened.sort(key=lambda pr: pr.achieved_at, reverse=True)
    return flattened[:limit]


def format_pr_value(value: float, pr_type: PRType, use_metric: bool = False) -> str:
    """Format a record value for display, e.g. ``140.0 lbs`` or ``2470 kg``."""
    unit = "kg" if use_metric else "lbs"
    if pr_type == PRType.MAX_WEIGHT:
        return f"{value:.1f} {unit}"
    return f"{value:.0f} {unit}"


def exercise_display_name(
    session_data: WorkoutSessionData,
    exercise_id: str,
    exercise_key: str,
) -> str:
    """Name records are keyed by: the snapshot's exercise name, else the key."""
    exercise = session_data.template_snapshot.find_exercise_by_key(exercise_key)
    if exercise is None:
        exercise = session_data.template_snapshot.find_exercise(exercise_id)
    if exercise is not None:
        return exercise.name
    return exercise_key or exercise_id


def detect_session_prs(
    session_id: str,
    session_data: WorkoutSessionData,
    current_prs: UserPersonalRecords,
) -> PRProcessingResult:
    """
    Detect and apply records for every exercise in a session.

    Exercises are processed in order against the running result so that the
    same exercise appearing twice cannot overwrite a better record.
    """
    records = dict(current_prs)
    new_prs: List[PRUpdate] = []
    achieved_at = utcnow()

    for exercise_id, performance in session_data.performance.items():
        name = exercise_display_name(session_data, exercise_id, performance.exercise_key)
        detected = detect_personal_records(name, performance.sets, records, session_id)
        if detected:
            records = update_personal_records(records, detected, achieved_at)
            new_prs.extend(detected)

    return PRProcessingResult(new_prs=new_prs, updated_user_prs=records)


class PRDetectionService:
    """Service for detecting and managing personal records."""

    def __init__(self, stats_repository: UserStatsRepository, top_prs_limit: int = 10):
        """Initialize the PR detection service.

        Args:
            stats_repository: Storage for the user's records document
            top_prs_limit: Default number of records returned by get_top_prs
        """
        self.stats_repository = stats_repository
        self.top_prs_limit = top_prs_limit

    def get_user_prs(self, user_id: str) -> UserPersonalRecords:
        return self.stats_repository.get_personal_records(user_id)

    def process_session_prs(
        self,
        user_id: str,
        session_id: str,
        session_data: WorkoutSessionData,
    ) -> PRProcessingResult:
        """Detect records in a completed session and persist any new ones.

        Raises:
            EnrichmentError: If the stored records cannot be read or written
        """
        try:
            current = self.stats_repository.get_personal_records(user_id)
            result = detect_session_prs(session_id, session_data, current)
            if result.new_prs:
                self.stats_repository.save_personal_records(user_id, result.updated_user_prs)
        except sqlite3.Error as e:
            raise EnrichmentError(
                f"Failed to store personal records: {e}",
                step="personal_records",
                details={"session_id": session_id},
            ) from e

        if result.new_prs:
            logger.info(
                f"Recorded {len(result.new_prs)} personal records for session {session_id}"
            )

        return result

    def compare_session(
        self,
        user_id: str,
        exercise_name: str,
        performed_sets: Sequence[PerformedSet],
    ) -> List[PRComparison]:
        return compare_to_prs(exercise_name, performed_sets, self.get_user_prs(user_id))

    def get_top_prs(self, user_id: str, limit: Optional[int] = None) -> List[TopPR]:
        return get_top_prs(self.get_user_prs(user_id), limit or self.top_prs_limit)
