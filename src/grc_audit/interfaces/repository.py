"""Repository interface for persisted audit records."""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """
    Abstract interface for storing and retrieving one kind of record.

    Implementations of this interface own the mapping between domain
    dataclasses and their storage representation.
    """

    @abstractmethod
    def get(self, entity_id: str) -> Optional[T]:
        """
        Fetch a record by ID.

        Args:
            entity_id: ID of the record.

        Returns:
            The record, or None if no record has this ID.
        """
        pass

    @abstractmethod
    def list(self, **filters: Any) -> List[T]:
        """
        List records matching the given filters.

        Args:
            **filters: Implementation-specific filter values. Filters left
                       as None are not applied.

        Returns:
            Matching records.
        """
        pass

    @abstractmethod
    def create(self, entity: T) -> T:
        """
        Store a new record.

        Args:
            entity: The record to store. Its ID is assigned by the caller.

        Returns:
            The stored record with timestamps filled in.
        """
        pass

    @abstractmethod
    def update(self, entity_id: str, **changes: Any) -> T:
        """
        Apply field changes to an existing record.

        Args:
            entity_id: ID of the record.
            **changes: Attribute names and their new values.

        Returns:
            The updated record.

        Raises:
            EntityNotFoundError: If no record has this ID.
        """
        pass

    @abstractmethod
    def delete(self, entity_id: str) -> None:
        """
        Remove a record.

        Args:
            entity_id: ID of the record.

        Raises:
            EntityNotFoundError: If no record has this ID.
        """
        pass
