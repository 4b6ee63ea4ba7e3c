"""SQLite-backed repository for per-user statistics.

One ``user_stats`` row per user holds the cumulative counters, the personal
records document, the achievements document and the active session. The
active session is guarded by ``active_version`` so that every write is a
compare-and-swap against the version the caller read.
"""

import json
import sqlite3
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ...models.achievements import UserAchievements
from ...models.base import ensure_aware, utcnow
from ...models.personal_records import (
    ExercisePR,
    count_personal_records,
    dump_personal_records,
    personal_records_adapter,
)
from ...models.sessions import ActiveWorkoutSessionData
from ...models.stats import MonthlyStats, UserStats
from ..database import Database
from .base import SQLiteRepositoryMixin


class UserStatsRepository(SQLiteRepositoryMixin):
    """Cumulative counters, records, achievements and active session per user."""

    def __init__(self, database: Database):
        self.database = database

    def _ensure_row(self, conn: sqlite3.Connection, user_id: str) -> None:
        conn.execute("""
            INSERT OR IGNORE INTO user_stats (user_id, personal_records, updated_at)
            VALUES (?, '{}', ?)
        """, (user_id, utcnow().isoformat()))

    # === Counters ===

    def get_stats(self, user_id: str) -> UserStats:
        """Get the user's counters; users without a row get zeroed stats."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM user_stats WHERE user_id = ?", (user_id,)
            ).fetchone()

        if row is None:
            return UserStats(user_id=user_id)

        records = personal_records_adapter.validate_json(row["personal_records"] or "{}")
        achievements = (
            UserAchievements.model_validate_json(row["achievements"])
            if row["achievements"]
            else UserAchievements()
        )
        last_workout_at = row["last_workout_at"]
        return UserStats(
            user_id=user_id,
            total_workouts=row["total_workouts"] or 0,
            total_volume=row["total_volume"] or 0.0,
            total_sets=row["total_sets"] or 0,
            total_exercises=row["total_exercises"] or 0,
            total_training_hours=row["total_training_hours"] or 0.0,
            unique_exercises=row["unique_exercises"] or 0,
            current_streak=row["current_streak"] or 0,
            longest_streak=row["longest_streak"] or 0,
            active_weeks=row["active_weeks"] or 0,
            last_workout_at=ensure_aware(datetime.fromisoformat(last_workout_at)) if last_workout_at else None,
            achievements=achievements,
            personal_record_count=count_personal_records(records),
        )

    def increment_completion(
        self,
        user_id: str,
        volume: float,
        sets: int,
        exercises: int,
        training_hours: float,
        completed_at: datetime,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """Add one completed workout to the cumulative counters."""
        with self._connection(conn) as c:
            self._ensure_row(c, user_id)
            c.execute("""
                UPDATE user_stats SET
                    total_workouts = total_workouts + 1,
                    total_volume = total_volume + ?,
                    total_sets = total_sets + ?,
                    total_exercises = total_exercises + ?,
                    total_training_hours = total_training_hours + ?,
                    last_workout_at = ?,
                    updated_at = ?
                WHERE user_id = ?
            """, (
                volume,
                sets,
                exercises,
                training_hours,
                ensure_aware(completed_at).isoformat(),
                utcnow().isoformat(),
                user_id,
            ))

    def update_derived_stats(
        self,
        user_id: str,
        unique_exercises: int,
        current_streak: int,
        longest_streak: int,
        active_weeks: int,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """Store statistics recomputed from session history. Longest streak never shrinks."""
        with self._connection(conn) as c:
            self._ensure_row(c, user_id)
            c.execute("""
                UPDATE user_stats SET
                    unique_exercises = ?,
                    current_streak = ?,
                    longest_streak = MAX(longest_streak, ?),
                    active_weeks = ?,
                    updated_at = ?
                WHERE user_id = ?
            """, (
                unique_exercises,
                current_streak,
                longest_streak,
                active_weeks,
                utcnow().isoformat(),
                user_id,
            ))

    # === Personal records ===

    def get_personal_records(self, user_id: str) -> Dict[str, ExercisePR]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT personal_records FROM user_stats WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None or not row["personal_records"]:
            return {}
        return personal_records_adapter.validate_json(row["personal_records"])

    def save_personal_records(
        self,
        user_id: str,
        records: Dict[str, ExercisePR],
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        with self._connection(conn) as c:
            self._ensure_row(c, user_id)
            c.execute(
                "UPDATE user_stats SET personal_records = ?, updated_at = ? WHERE user_id = ?",
                (json.dumps(dump_personal_records(records)), utcnow().isoformat(), user_id),
            )

    # === Achievements ===

    def get_achievements(self, user_id: str) -> UserAchievements:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT achievements FROM user_stats WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None or not row["achievements"]:
            return UserAchievements()
        return UserAchievements.model_validate_json(row["achievements"])

    def save_achievements(
        self,
        user_id: str,
        achievements: UserAchievements,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        with self._connection(conn) as c:
            self._ensure_row(c, user_id)
            c.execute(
                "UPDATE user_stats SET achievements = ?, updated_at = ? WHERE user_id = ?",
                (achievements.model_dump_json(by_alias=True), utcnow().isoformat(), user_id),
            )

    # === Active session ===

    def get_active_session(
        self,
        user_id: str,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[ActiveWorkoutSessionData]:
        with self._connection(conn) as c:
            row = c.execute(
                "SELECT active_session_data FROM user_stats WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None or not row["active_session_data"]:
            return None
        return ActiveWorkoutSessionData.model_validate_json(row["active_session_data"])

    def get_active_session_document(self, user_id: str) -> Optional[Tuple[dict, Optional[int]]]:
        """Raw stored active-session JSON and its version, without validation."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT active_session_data, active_version FROM user_stats WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if row is None or not row["active_session_data"]:
            return None
        return json.loads(row["active_session_data"]), row["active_version"]

    def create_active_session(
        self,
        user_id: str,
        data: ActiveWorkoutSessionData,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        """Store a new active session. Returns False if one already exists."""
        with self._connection(conn) as c:
            self._ensure_row(c, user_id)
            cursor = c.execute("""
                UPDATE user_stats SET active_session_data = ?, active_version = ?
                WHERE user_id = ? AND active_session_data IS NULL
            """, (data.model_dump_json(by_alias=True), data.version, user_id))
            return cursor.rowcount == 1

    def replace_active_session(
        self,
        user_id: str,
        data: ActiveWorkoutSessionData,
        expected_version: int,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        """Overwrite the active session if its stored version still equals ``expected_version``."""
        with self._connection(conn) as c:
            cursor = c.execute("""
                UPDATE user_stats SET active_session_data = ?, active_version = ?
                WHERE user_id = ? AND active_session_data IS NOT NULL AND active_version = ?
            """, (data.model_dump_json(by_alias=True), data.version, user_id, expected_version))
            return cursor.rowcount == 1

    def clear_active_session(
        self,
        user_id: str,
        expected_version: Optional[int] = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> bool:
        """Remove the active session. With ``expected_version`` the removal is a compare-and-swap."""
        query = """
            UPDATE user_stats SET active_session_data = NULL, active_version = NULL
            WHERE user_id = ? AND active_session_data IS NOT NULL
        """
        params: list = [user_id]
        if expected_version is not None:
            query += " AND active_version = ?"
            params.append(expected_version)

        with self._connection(conn) as c:
            cursor = c.execute(query, params)
            return cursor.rowcount == 1

    # === Monthly statistics ===

    def upsert_monthly_stats(
        self,
        user_id: str,
        year: int,
        month: int,
        volume: float,
        training_hours: float,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        """Add one workout to the user's monthly aggregate."""
        with self._connection(conn) as c:
            c.execute("""
                INSERT INTO monthly_stats
                (user_id, year, month, workouts_count, total_volume, total_training_hours, updated_at)
                VALUES (?, ?, ?, 1, ?, ?, ?)
                ON CONFLICT(user_id, year, month) DO UPDATE SET
                    workouts_count = workouts_count + 1,
                    total_volume = total_volume + excluded.total_volume,
                    total_training_hours = total_training_hours + excluded.total_training_hours,
                    updated_at = excluded.updated_at
            """, (user_id, year, month, volume, training_hours, utcnow().isoformat()))

    def get_monthly_stats(self, user_id: str, limit: int = 12) -> List[MonthlyStats]:
        """Most recent monthly aggregates, newest first."""
        with self._connection() as conn:
            rows = conn.execute("""
                SELECT * FROM monthly_stats
                WHERE user_id = ?
                ORDER BY year DESC, month DESC
                LIMIT ?
            """, (user_id, limit)).fetchall()

        return [
            MonthlyStats(
                user_id=row["user_id"],
                year=row["year"],
                month=row["month"],
                workouts_count=row["workouts_count"],
                total_volume=row["total_volume"],
                total_training_hours=row["total_training_hours"],
            )
            for row in rows
        ]
