"""
Filter and sort language understood by the entity stores.

A filter is a mapping of field name to a required value:

- a scalar matches by equality (``None`` matches NULL);
- a list, tuple or set is a disjunction of values (SQL ``IN``);
- ``Substring(term)`` is a case-insensitive substring match;
- the key ``"$or"`` holds a list of sub-filters, any of which may match.

A sort is a mapping of field name to ``"asc"``/``"desc"`` (or ``1``/``-1``).
JSON columns cannot be sorted on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import JSON, and_, false, or_
from sqlalchemy.sql.elements import ColumnElement

from coursehub.core.errors import ValidationFailedError


OR = "$or"

Filter = Mapping[str, Any]
SortSpec = Mapping[str, Union[str, int]]


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Substring:
    """Case-insensitive substring match against a text field."""
    term: str


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def plain_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Replace enum members with their stored values."""
    return {key: _plain(value) for key, value in fields.items()}


def _column(model, field: str):
    columns = model.__table__.columns
    if field not in columns:
        raise ValidationFailedError(f"Unknown field '{field}' for {model.__name__}")
    return getattr(model, field)


def compile_filter(model, filter: Optional[Filter]) -> List[ColumnElement]:
    """Turn a filter mapping into a list of SQLAlchemy clauses (implicitly ANDed)."""
    clauses: List[ColumnElement] = []
    for field, value in (filter or {}).items():
        if field == OR:
            if not isinstance(value, (list, tuple)) or not all(isinstance(sub, Mapping) for sub in value):
                raise ValidationFailedError(f"'{OR}' expects a list of filters")
            alternatives = [and_(*compile_filter(model, sub)) for sub in value]
            clauses.append(or_(*alternatives) if alternatives else false())
            continue

        column = _column(model, field)
        if isinstance(value, Substring):
            clauses.append(column.ilike(f"%{_escape_like(value.term)}%", escape="\\"))
        elif isinstance(value, (list, tuple, set, frozenset)):
            values = [_plain(v) for v in value]
            clauses.append(column.in_(values) if values else false())
        elif value is None:
            clauses.append(column.is_(None))
        else:
            clauses.append(column == _plain(value))
    return clauses


def _direction(value: Union[str, int, SortDirection]) -> SortDirection:
    if value in (1, SortDirection.ASC):
        return SortDirection.ASC
    if value in (-1, SortDirection.DESC):
        return SortDirection.DESC
    raise ValidationFailedError(f"Invalid sort direction '{value}'")


def compile_sort(model, sort: Optional[SortSpec]) -> list:
    order_by = []
    for field, direction in (sort or {}).items():
        column = _column(model, field)
        if isinstance(model.__table__.columns[field].type, JSON):
            raise ValidationFailedError(f"Cannot sort {model.__name__} by '{field}'")
        if _direction(direction) is SortDirection.DESC:
            order_by.append(column.desc())
        else:
            order_by.append(column.asc())
    return order_by
