"""SQLite-backed repository for workout templates."""

import sqlite3
from datetime import datetime
from typing import List, Optional

from ...models.base import utcnow
from ...models.templates import WorkoutTemplateData, WorkoutTemplateRecord
from ..database import Database
from .base import Repository, SQLiteRepositoryMixin


class TemplateRepository(SQLiteRepositoryMixin, Repository[WorkoutTemplateRecord]):
    """
    SQLite-backed repository for WorkoutTemplateRecord entities.

    The template document is stored as camelCase JSON and validated on
    every read.
    """

    def __init__(self, database: Database):
        self.database = database

    def _row_to_template(self, row: sqlite3.Row) -> WorkoutTemplateRecord:
        """Convert a database row to a WorkoutTemplateRecord."""
        return WorkoutTemplateRecord(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            template_data=WorkoutTemplateData.model_validate_json(row["template_data"]),
            total_volume=row["total_volume"] or 0.0,
            estimated_duration=row["estimated_duration"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def save(
        self,
        entity: WorkoutTemplateRecord,
        conn: Optional[sqlite3.Connection] = None,
    ) -> WorkoutTemplateRecord:
        """Insert or update a template. ``created_at`` is kept on update."""
        now = utcnow()
        created_at = entity.created_at or now
        saved = entity.model_copy(update={"created_at": created_at, "updated_at": now})

        with self._connection(conn) as c:
            c.execute("""
                INSERT INTO workout_templates
                (id, user_id, name, template_data, total_volume,
                 estimated_duration, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    template_data = excluded.template_data,
                    total_volume = excluded.total_volume,
                    estimated_duration = excluded.estimated_duration,
                    updated_at = excluded.updated_at
            """, (
                saved.id,
                saved.user_id,
                saved.name,
                saved.template_data.model_dump_json(by_alias=True, exclude_none=True),
                saved.total_volume,
                saved.estimated_duration,
                created_at.isoformat(),
                now.isoformat(),
            ))

        return saved

    def get(self, entity_id: str) -> Optional[WorkoutTemplateRecord]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM workout_templates WHERE id = ?", (entity_id,)
            ).fetchone()
        return self._row_to_template(row) if row else None

    def get_for_user(self, template_id: str, user_id: str) -> Optional[WorkoutTemplateRecord]:
        """Get a template only if it is owned by the user."""
        template = self.get(template_id)
        if template is None or template.user_id != user_id:
            return None
        return template

    def get_all(
        self,
        limit: int = 100,
        offset: int = 0,
        **filters
    ) -> List[WorkoutTemplateRecord]:
        """
        List templates, newest first.

        Args:
            limit: Maximum number of templates to return
            offset: Number of templates to skip
            **filters: ``user_id`` restricts to one owner
        """
        query = "SELECT * FROM workout_templates"
        params: list = []
        if filters.get("user_id"):
            query += " WHERE user_id = ?"
            params.append(filters["user_id"])
        query += " ORDER BY updated_at DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        with self._connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_template(row) for row in rows]

    def delete(self, entity_id: str) -> bool:
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM workout_templates WHERE id = ?", (entity_id,))
            return cursor.rowcount > 0

    def exists(self, entity_id: str) -> bool:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT 1 FROM workout_templates WHERE id = ?", (entity_id,)
            ).fetchone()
        return row is not None

    def count(self, **filters) -> int:
        query = "SELECT COUNT(*) AS cnt FROM workout_templates"
        params: list = []
        if filters.get("user_id"):
            query += " WHERE user_id = ?"
            params.append(filters["user_id"])

        with self._connection() as conn:
            row = conn.execute(query, params).fetchone()
        return row["cnt"]
