"""Base repository interfaces.

Repositories share a ``Database`` and accept an optional open connection on
write methods so a caller can group writes from several repositories into one
transaction.
"""

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generic, Iterator, List, Optional, TypeVar

from ..database import Database

# Type variable for the entity type stored in the repository
T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """
    Abstract base class for repository implementations.

    Provides a standard interface for CRUD operations on entities,
    abstracting away the underlying storage mechanism.

    Type Parameters:
        T: The type of entity stored in this repository
    """

    @abstractmethod
    def save(self, entity: T) -> T:
        """
        Save an entity to the repository.

        If the entity already exists (by ID), it will be updated.
        Otherwise, a new entity will be created.
        """

    @abstractmethod
    def get(self, entity_id: str) -> Optional[T]:
        """Retrieve an entity by its ID, or None if not found."""

    @abstractmethod
    def get_all(
        self,
        limit: int = 100,
        offset: int = 0,
        **filters
    ) -> List[T]:
        """
        Retrieve all entities matching the given filters.

        Args:
            limit: Maximum number of entities to return
            offset: Number of entities to skip
            **filters: Additional filter criteria

        Returns:
            List of matching entities
        """

    @abstractmethod
    def delete(self, entity_id: str) -> bool:
        """Delete an entity by its ID. Returns False if not found."""

    @abstractmethod
    def exists(self, entity_id: str) -> bool:
        """Check if an entity exists by its ID."""

    @abstractmethod
    def count(self, **filters) -> int:
        """Count entities matching the given filters."""


class SQLiteRepositoryMixin:
    """Connection handling shared by the SQLite repositories."""

    database: Database

    @contextmanager
    def _connection(self, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
        """Reuse the caller's connection, or open a new one that commits on exit."""
        if conn is not None:
            yield conn
            return
        with self.database.connection() as new_conn:
            yield new_conn
