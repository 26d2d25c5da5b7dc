"""
Ordinal allocation for lessons within a course and topics within a lesson.

Orders are unique per parent scope. The store carries a unique constraint
as a backstop; the checks here reject duplicates before any write.
"""

import logging
from typing import Any, List, Optional, Sequence

from coursehub.core.database import Database
from coursehub.core.errors import ConflictError, ValidationFailedError
from coursehub.store.base import EntityStore


logger = logging.getLogger(__name__)


class OrdinalAllocator:
    """
    Allocates and validates ``order`` values inside one parent scope.

    Args:
        database: Database providing transactions for reordering
        store: Store of the ordered children
        scope_field: Field holding the parent id ("course_id" or "lesson_id")
    """

    def __init__(self, database: Database, store: EntityStore[Any], scope_field: str):
        self.database = database
        self.store = store
        self.scope_field = scope_field

    async def next_order(self, scope_id: str) -> int:
        """1 for an empty scope, otherwise the highest order plus one."""
        highest = await self.store.find_one({self.scope_field: scope_id}, sort={"order": "desc"})
        return highest.order + 1 if highest is not None else 1

    async def is_available(self, scope_id: str, proposed: int, excluding_id: Optional[str] = None) -> bool:
        existing = await self.store.find_one({self.scope_field: scope_id, "order": proposed})
        return existing is None or existing.id == excluding_id

    async def validate_order(self, scope_id: str, proposed: int, excluding_id: Optional[str] = None) -> int:
        """
        Check that ``proposed`` is free in the scope.

        Returns:
            int: the accepted order

        Raises:
            ConflictError: another child already holds the order
        """
        if not await self.is_available(scope_id, proposed, excluding_id):
            raise ConflictError(f"Order {proposed} is already taken in this {self.scope_field.replace('_id', '')}")
        return proposed

    async def allocate(self, scope_id: str, requested: Optional[int] = None) -> int:
        """Use the requested order if it is free, or the next one if none was requested."""
        if requested is None:
            return await self.next_order(scope_id)
        return await self.validate_order(scope_id, requested)

    async def reorder(self, scope_id: str, ordered_ids: Sequence[str]) -> List[Any]:
        """
        Assign 1..N to the scope's children in the given order.

        ordered_ids must name every child of the scope exactly once. Children
        are first parked on negative orders so the unique constraint holds
        after every single update.
        """
        async with self.database.transaction():
            children = await self.store.find({self.scope_field: scope_id}, sort={"order": "asc"})
            current_ids = {child.id for child in children}
            if len(ordered_ids) != len(current_ids) or set(ordered_ids) != current_ids:
                raise ValidationFailedError(
                    f"Reorder must list every item of the {self.scope_field.replace('_id', '')} exactly once"
                )

            for index, child in enumerate(children, start=1):
                await self.store.update_by_id(child.id, {"order": -index})

            reordered = []
            for position, child_id in enumerate(ordered_ids, start=1):
                reordered.append(await self.store.update_by_id(child_id, {"order": position}))

        logger.info(f"Reordered {len(reordered)} items under {self.scope_field}={scope_id}")
        return reordered
