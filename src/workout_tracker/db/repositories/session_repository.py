"""SQLite-backed repository for scheduled and completed workout sessions."""

import sqlite3
from datetime import datetime
from typing import List, Optional

from ...models.base import ensure_aware, utcnow
from ...models.sessions import SessionStatus, WorkoutSessionData, WorkoutSessionRecord
from ..database import Database
from .base import Repository, SQLiteRepositoryMixin


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return ensure_aware(datetime.fromisoformat(value))


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return ensure_aware(value).isoformat()


class SessionRepository(SQLiteRepositoryMixin, Repository[WorkoutSessionRecord]):
    """
    SQLite-backed repository for WorkoutSessionRecord entities.

    The session document (template snapshot, performance, environment and
    metrics) is stored as camelCase JSON in ``performance_data``.
    """

    def __init__(self, database: Database):
        self.database = database

    def _row_to_session(self, row: sqlite3.Row) -> WorkoutSessionRecord:
        """Convert a database row to a WorkoutSessionRecord."""
        return WorkoutSessionRecord(
            id=row["id"],
            user_id=row["user_id"],
            template_id=row["template_id"],
            template_name=row["template_name"],
            status=SessionStatus(row["status"]),
            scheduled_at=_parse_datetime(row["scheduled_at"]),
            completed_at=_parse_datetime(row["completed_at"]),
            duration=row["duration"],
            notes=row["notes"],
            performance_data=WorkoutSessionData.model_validate_json(row["performance_data"]),
            total_volume=row["total_volume"] or 0.0,
            total_sets=row["total_sets"] or 0,
            total_exercises=row["total_exercises"] or 0,
            personal_records=row["personal_records"] or 0,
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def save(
        self,
        entity: WorkoutSessionRecord,
        conn: Optional[sqlite3.Connection] = None,
    ) -> WorkoutSessionRecord:
        """Insert or update a session row."""
        now = utcnow()
        saved = entity.model_copy(
            update={"created_at": entity.created_at or now, "updated_at": now}
        )

        with self._connection(conn) as c:
            c.execute("""
                INSERT INTO workout_sessions
                (id, user_id, template_id, template_name, status, scheduled_at,
                 completed_at, duration, notes, performance_data, total_volume,
                 total_sets, total_exercises, personal_records, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    status = excluded.status,
                    completed_at = excluded.completed_at,
                    duration = excluded.duration,
                    notes = excluded.notes,
                    performance_data = excluded.performance_data,
                    total_volume = excluded.total_volume,
                    total_sets = excluded.total_sets,
                    total_exercises = excluded.total_exercises,
                    personal_records = excluded.personal_records,
                    updated_at = excluded.updated_at
            """, (
                saved.id,
                saved.user_id,
                saved.template_id,
                saved.template_name,
                saved.status.value,
                _format_datetime(saved.scheduled_at),
                _format_datetime(saved.completed_at),
                saved.duration,
                saved.notes,
                saved.performance_data.model_dump_json(by_alias=True, exclude_none=True),
                saved.total_volume,
                saved.total_sets,
                saved.total_exercises,
                saved.personal_records,
                _format_datetime(saved.created_at),
                _format_datetime(now),
            ))

        return saved

    def get(self, entity_id: str) -> Optional[WorkoutSessionRecord]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM workout_sessions WHERE id = ?", (entity_id,)
            ).fetchone()
        return self._row_to_session(row) if row else None

    def get_for_user(self, session_id: str, user_id: str) -> Optional[WorkoutSessionRecord]:
        """Get a session only if it is owned by the user."""
        session = self.get(session_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    def get_all(
        self,
        limit: int = 100,
        offset: int = 0,
        **filters
    ) -> List[WorkoutSessionRecord]:
        """
        List sessions.

        Args:
            limit: Maximum number of sessions to return
            offset: Number of sessions to skip
            **filters: ``user_id`` and ``status``. Scheduled sessions are
                ordered by date ascending, everything else newest first.
        """
        conditions = []
        params: list = []
        if filters.get("user_id"):
            conditions.append("user_id = ?")
            params.append(filters["user_id"])
        status = filters.get("status")
        if status:
            conditions.append("status = ?")
            params.append(SessionStatus(status).value)

        query = "SELECT * FROM workout_sessions"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        if status == SessionStatus.SCHEDULED:
            query += " ORDER BY scheduled_at ASC"
        else:
            query += " ORDER BY COALESCE(completed_at, created_at) DESC"
        query += " LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_session(row) for row in rows]

    def get_completed_dates(self, user_id: str) -> List[datetime]:
        """Completion timestamps of every completed session, oldest first."""
        with self._connection() as conn:
            rows = conn.execute("""
                SELECT completed_at FROM workout_sessions
                WHERE user_id = ? AND status = ? AND completed_at IS NOT NULL
                ORDER BY completed_at ASC
            """, (user_id, SessionStatus.COMPLETED.value)).fetchall()
        return [_parse_datetime(row["completed_at"]) for row in rows]

    def get_completed_exercise_keys(self, user_id: str) -> List[str]:
        """Distinct exercise keys performed across all completed sessions."""
        keys = {}
        with self._connection() as conn:
            rows = conn.execute("""
                SELECT performance_data FROM workout_sessions
                WHERE user_id = ? AND status = ?
            """, (user_id, SessionStatus.COMPLETED.value)).fetchall()
        for row in rows:
            data = WorkoutSessionData.model_validate_json(row["performance_data"])
            for entry in data.performance.values():
                keys.setdefault(entry.exercise_key, None)
        return list(keys)

    def delete(self, entity_id: str) -> bool:
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM workout_sessions WHERE id = ?", (entity_id,))
            return cursor.rowcount > 0

    def exists(self, entity_id: str) -> bool:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM workout_sessions WHERE id = ?", (entity_id,)
            ).fetchone()
        return row is not None

    def count(self, **filters) -> int:
        conditions = []
        params: list = []
        if filters.get("user_id"):
            conditions.append("user_id = ?")
            params.append(filters["user_id"])
        if filters.get("status"):
            conditions.append("status = ?")
            params.append(SessionStatus(filters["status"]).value)

        query = "SELECT COUNT(*) AS cnt FROM workout_sessions"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)

        with self._connection() as conn:
            row = conn.execute(query, params).fetchone()
        return row["cnt"]
