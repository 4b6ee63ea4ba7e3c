"""SQLite database for storing workout data."""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .schema import SCHEMA


def get_default_db_path() -> Path:
    """Get the default database path."""
    env_path = os.environ.get("WORKOUT_DB_PATH")
    if env_path:
        return Path(env_path)

    # Path: src/workout_tracker/db/database.py, up 4 levels to the project root
    return Path(__file__).parent.parent.parent.parent / "workout_tracker.db"


class Database:
    """SQLite database manager shared by the repositories."""

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize the workout database.

        Args:
            db_path: Path to SQLite database file. If not provided,
                     uses WORKOUT_DB_PATH env var or default location.
        """
        if db_path:
            self.db_path = Path(db_path)
        else:
            self.db_path = get_default_db_path()

        self._init_db()

    def _init_db(self):
        """Initialize database tables."""
        with self.connection() as conn:
            conn.executescript(SCHEMA)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """
        Get a database connection that commits on success and rolls back on error.

        Everything executed on the yielded connection forms one transaction.
        """
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
