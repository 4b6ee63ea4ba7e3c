"""Database module for workout data."""

from .database import Database, get_default_db_path
from .schema import SCHEMA

__all__ = ["Database", "get_default_db_path", "SCHEMA"]
