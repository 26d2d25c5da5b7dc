"""
Query option and pagination schemas.
"""

from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, Field

from coursehub.store.filters import SortDirection


T = TypeVar("T")


class QueryOptions(BaseModel):
    """
    Declarative description of a list query.

    search_fields and sort_fields are declared by the calling service, not by
    end users; when sort_fields is set, sorting on any other field is rejected.
    Sort directions are "asc"/"desc" or 1/-1.
    Page and limit values that are missing or not positive fall back to the
    configured defaults when the query runs.
    """
    filters: Dict[str, Any] = Field(default_factory=dict)
    search_term: Optional[str] = None
    search_fields: List[str] = Field(default_factory=list)
    sort: Optional[Dict[str, Union[SortDirection, Literal[1, -1]]]] = None
    sort_fields: List[str] = Field(default_factory=list)
    page: Optional[int] = None
    limit: Optional[int] = None


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class PageResponse(BaseModel, Generic[T]):
    items: List[T]
    meta: PageMeta
