"""Abstract entity store interface."""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Mapping, Optional, TypeVar

from .filters import Filter, SortSpec


T = TypeVar("T")


class EntityStore(ABC, Generic[T]):
    """Uniform async CRUD over one typed collection."""

    @abstractmethod
    async def find(
        self,
        filter: Optional[Filter] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[T]:
        """Find matching records, sorted, skipped and limited."""

    @abstractmethod
    async def find_one(self, filter: Filter, sort: Optional[SortSpec] = None) -> Optional[T]:
        """First matching record, or None."""

    @abstractmethod
    async def find_by_id(self, id: str, for_update: bool = False) -> Optional[T]:
        """
        Record by identifier, or None.

        for_update locks the row until the enclosing transaction ends.
        """

    @abstractmethod
    async def count(self, filter: Optional[Filter] = None) -> int:
        """Number of matching records."""

    @abstractmethod
    async def create(self, fields: Mapping[str, Any]) -> T:
        """Insert a record and return it."""

    @abstractmethod
    async def update_by_id(self, id: str, fields: Mapping[str, Any]) -> Optional[T]:
        """Set fields on a record; None if it does not exist."""

    @abstractmethod
    async def increment(self, id: str, field: str, amount: int = 1) -> Optional[T]:
        """Atomically add ``amount`` to a numeric field; None if the record does not exist."""

    @abstractmethod
    async def delete_by_id(self, id: str) -> bool:
        """Delete a record. Returns True if it existed."""

    @abstractmethod
    async def delete_many(self, filter: Filter) -> int:
        """Delete matching records and return how many were removed."""
