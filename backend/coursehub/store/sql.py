"""
SQLAlchemy-backed entity store.

Each operation runs in the session handed out by ``Database.session()``:
the enclosing transaction's when there is one, a short-lived one otherwise.
"""

import logging
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar

from sqlalchemy import delete, func, select, update

from coursehub.core.database import Database, translate_store_errors
from coursehub.core.errors import ValidationFailedError
from coursehub.models.base import utcnow
from .base import EntityStore
from .filters import Filter, SortSpec, compile_filter, compile_sort, plain_fields


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fields that are never written through update_by_id
_PROTECTED_FIELDS = frozenset({"id", "created_at", "version"})


class SqlEntityStore(EntityStore[T], Generic[T]):
    """Entity store over one SQLAlchemy model."""

    def __init__(self, database: Database, model: Type[T]):
        self.database = database
        self.model = model
        self._columns = model.__table__.columns

    def __repr__(self) -> str:
        return f"<SqlEntityStore(model={self.model.__name__})>"

    @property
    def _name(self) -> str:
        return self.model.__tablename__

    def _check_fields(self, fields: Mapping[str, Any]) -> None:
        unknown = [name for name in fields if name not in self._columns]
        if unknown:
            raise ValidationFailedError(
                f"Unknown field(s) for {self.model.__name__}: {', '.join(sorted(unknown))}"
            )

    async def find(
        self,
        filter: Optional[Filter] = None,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[T]:
        stmt = select(self.model).where(*compile_filter(self.model, filter))
        order_by = compile_sort(self.model, sort)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with translate_store_errors(f"find on {self._name}"):
            async with self.database.session() as session:
                result = await session.scalars(stmt)
                return list(result.all())

    async def find_one(self, filter: Filter, sort: Optional[SortSpec] = None) -> Optional[T]:
        records = await self.find(filter, sort=sort, limit=1)
        return records[0] if records else None

    async def find_by_id(self, id: str, for_update: bool = False) -> Optional[T]:
        async with translate_store_errors(f"find_by_id on {self._name}"):
            async with self.database.session() as session:
                if for_update:
                    # Re-read under a row lock even when the session already holds the record
                    return await session.get(self.model, id, with_for_update=True, populate_existing=True)
                return await session.get(self.model, id)

    async def count(self, filter: Optional[Filter] = None) -> int:
        stmt = select(func.count()).select_from(self.model).where(*compile_filter(self.model, filter))
        async with translate_store_errors(f"count on {self._name}"):
            async with self.database.session() as session:
                return int(await session.scalar(stmt) or 0)

    async def create(self, fields: Mapping[str, Any]) -> T:
        self._check_fields(fields)
        record = self.model(**plain_fields(fields))
        async with translate_store_errors(f"create on {self._name}"):
            async with self.database.session() as session:
                session.add(record)
                await session.flush()
                await session.refresh(record)
        return record

    async def update_by_id(self, id: str, fields: Mapping[str, Any]) -> Optional[T]:
        self._check_fields(fields)
        protected = _PROTECTED_FIELDS.intersection(fields)
        if protected:
            raise ValidationFailedError(f"Field(s) cannot be updated: {', '.join(sorted(protected))}")

        async with translate_store_errors(f"update on {self._name}"):
            async with self.database.session() as session:
                record = await session.get(self.model, id)
                if record is None:
                    return None
                for field, value in plain_fields(fields).items():
                    setattr(record, field, value)
                if "updated_at" in self._columns:
                    record.updated_at = utcnow()
                await session.flush()
                return record

    async def increment(self, id: str, field: str, amount: int = 1) -> Optional[T]:
        self._check_fields({field: amount})
        column = getattr(self.model, field)
        values = {field: column + amount}
        if "updated_at" in self._columns:
            values["updated_at"] = utcnow()
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        async with translate_store_errors(f"increment on {self._name}"):
            async with self.database.session() as session:
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    return None
                return await session.get(self.model, id, populate_existing=True)

    async def delete_by_id(self, id: str) -> bool:
        stmt = delete(self.model).where(self.model.id == id).execution_options(synchronize_session=False)
        async with translate_store_errors(f"delete on {self._name}"):
            async with self.database.session() as session:
                result = await session.execute(stmt)
                return result.rowcount > 0

    async def delete_many(self, filter: Filter) -> int:
        stmt = (
            delete(self.model)
            .where(*compile_filter(self.model, filter))
            .execution_options(synchronize_session=False)
        )
        async with translate_store_errors(f"delete_many on {self._name}"):
            async with self.database.session() as session:
                result = await session.execute(stmt)
                return result.rowcount
