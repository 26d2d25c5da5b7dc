"""
Entity stores for Coursehub.

- base: the abstract store interface consumed by the services
- filters: filter/sort language shared by every store
- sql: SQLAlchemy implementation
"""

from .base import EntityStore
from .filters import OR, SortDirection, Substring
from .sql import SqlEntityStore

__all__ = [
    "EntityStore",
    "OR",
    "SortDirection",
    "Substring",
    "SqlEntityStore"
]
