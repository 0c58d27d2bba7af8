"""Query composer data types: predicate conditions, sort keys, query spec, and pagination"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel


class ResourceKind(str, Enum):
    """Listing endpoints the query composer knows how to configure"""
    posts = "posts"
    post_search = "post_search"
    categories = "categories"
    contacts = "contacts"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


RELEVANCE = "score"     # pseudo sort field: text-search relevance


@dataclass(frozen=True)
class SortKey:
    field: str
    direction: SortDirection = SortDirection.asc


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class AnyOf:
    """field value is one of values"""
    field: str
    values: tuple[Any, ...]


@dataclass(frozen=True)
class HasAnyTag:
    """record's tag set intersects values"""
    field: str
    values: tuple[str, ...]


@dataclass(frozen=True)
class DateRange:
    field: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass(frozen=True)
class TextSearch:
    """Store text search: any term matching any weighted field; score is the matched weight sum."""
    query: str
    terms: tuple[str, ...]
    weights: tuple[tuple[str, int], ...]
    field: str = "search"


Condition = Union[Equals, AnyOf, HasAnyTag, DateRange, TextSearch]


@dataclass(frozen=True)
class Predicate:
    """Conjunction of conditions, at most one per field."""
    conditions: tuple[Condition, ...] = ()

    def get(self, name: str) -> Optional[Condition]:
        return next((c for c in self.conditions if c.field == name), None)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    @property
    def fields(self) -> list[str]:
        return [c.field for c in self.conditions]

    @property
    def text_search(self) -> Optional[TextSearch]:
        return next((c for c in self.conditions if isinstance(c, TextSearch)), None)


@dataclass(frozen=True)
class QuerySpec:
    kind: ResourceKind
    filter: Predicate
    sort: tuple[SortKey, ...]
    page: int
    limit: int
    skip: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "skip", (self.page - 1) * self.limit)


class PageRef(BaseModel):
    page: int
    limit: int


class PaginationResult(BaseModel):
    next: Optional[PageRef] = None
    prev: Optional[PageRef] = None
