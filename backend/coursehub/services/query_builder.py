"""
Generic paginated queries over any entity store.

Turns QueryOptions (filters, search term over declared fields, sort, page and
limit) into one page of records plus the total count and page metadata.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar, Union

from coursehub.core.config import Settings
from coursehub.core.errors import ValidationFailedError
from coursehub.schemas.query import PageMeta, QueryOptions
from coursehub.store.base import EntityStore
from coursehub.store.filters import OR, SortDirection, Substring
from .common import parse_input


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SORT = {"created_at": SortDirection.DESC}


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int

    @property
    def meta(self) -> PageMeta:
        return PageMeta(
            total=self.total,
            page=self.page,
            limit=self.limit,
            total_pages=self.total_pages
        )


class QueryBuilder(Generic[T]):
    """Paginated, searchable listing over one store."""

    def __init__(self, store: EntityStore[T], settings: Settings):
        self.store = store
        self.settings = settings

    def resolve_pagination(self, page: Optional[int], limit: Optional[int]) -> tuple:
        """Coerce missing or non-positive values to defaults and bound the limit."""
        if not page or page < 1:
            page = self.settings.DEFAULT_PAGE
        if not limit or limit < 1:
            limit = self.settings.DEFAULT_PAGE_LIMIT
        limit = min(limit, self.settings.MAX_PAGE_LIMIT)
        return page, limit

    def build_filter(
        self,
        options: QueryOptions,
        fixed_filters: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        conditions: Dict[str, Any] = dict(options.filters)
        # Fixed filters always win over caller supplied ones
        conditions.update(fixed_filters or {})

        search_term = (options.search_term or "").strip()
        if search_term and options.search_fields:
            conditions[OR] = [{field: Substring(search_term)} for field in options.search_fields]

        return conditions

    @staticmethod
    def build_sort(options: QueryOptions) -> Dict[str, Any]:
        if options.sort and options.sort_fields:
            rejected = [field for field in options.sort if field not in options.sort_fields]
            if rejected:
                raise ValidationFailedError(
                    f"Cannot sort by {', '.join(rejected)}; allowed: {', '.join(options.sort_fields)}"
                )

        sort = dict(options.sort or DEFAULT_SORT)
        # Tie-break on id so equal sort keys page deterministically
        sort.setdefault("id", SortDirection.ASC)
        return sort

    async def query(
        self,
        options: Union[QueryOptions, Mapping[str, Any], None] = None,
        fixed_filters: Optional[Mapping[str, Any]] = None
    ) -> Page[T]:
        options = parse_input(QueryOptions, options or {})
        page, limit = self.resolve_pagination(options.page, options.limit)
        skip = (page - 1) * limit

        conditions = self.build_filter(options, fixed_filters)
        sort = self.build_sort(options)

        items, total = await asyncio.gather(
            self.store.find(conditions, sort=sort, skip=skip, limit=limit),
            self.store.count(conditions),
        )

        total_pages = math.ceil(total / limit)
        logger.debug(f"Query on {self.store!r}: page {page}/{total_pages}, {total} total")
        return Page(items=items, total=total, page=page, limit=limit, total_pages=total_pages)
