"""Executes a composed QuerySpec against the SQL store: filter, text search, sort, page, and count

Field names in a QuerySpec are taken verbatim from the composer. They are
resolved against the table's columns here, camelCase mapped to snake_case,
and anything that names no column is dropped; user input never reaches SQL
as anything but a bound parameter.
"""

import logging
import operator
from functools import reduce
from typing import Any, Optional

from pydantic import BaseModel
from sqlalchemy import and_, case, func, literal, or_
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, SQLModel, select

from blogcore.core.query.models import (
    RELEVANCE, AnyOf, Condition, DateRange, Equals, HasAnyTag, PaginationResult,
    QuerySpec, ResourceKind, SortDirection, TextSearch,
)
from blogcore.core.query.pagination import paginate_spec
from blogcore.core.query.params import to_snake
from blogcore.crud.models import Category, Contact, Post, PostTag


logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"

MODELS: dict[ResourceKind, type[SQLModel]] = {
    ResourceKind.posts: Post,
    ResourceKind.post_search: Post,
    ResourceKind.categories: Category,
    ResourceKind.contacts: Contact,
}

# model -> (link table owner column, link table tag column)
TAG_LINKS = {
    Post: (PostTag.post_id, PostTag.tag_name),
}


class ListingPage(BaseModel):
    """Listing response envelope: {success, count, total, pagination, data}."""
    success: bool = True
    count: int
    total: int
    pagination: PaginationResult
    data: list[Any]


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text only ever matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def column_for(model: type[SQLModel], name: str) -> Optional[ColumnElement]:
    """Return the table column a QuerySpec field names, or None if there is none."""
    table = model.__table__
    for candidate in (name, to_snake(name)):
        if candidate in table.columns:
            return getattr(model, candidate)
    return None


def _contains(column: ColumnElement, term: str) -> ColumnElement:
    return func.lower(column).like(f"%{escape_like(term)}%", escape=LIKE_ESCAPE)


def _search_pairs(model: type[SQLModel], search: TextSearch) -> list[tuple[ColumnElement, int]]:
    """(match clause, weight) for every term/field pair whose field exists."""
    pairs = []
    for name, weight in search.weights:
        column = column_for(model, name)
        if column is None:
            logger.debug("Text search field %r is not a column of %s", name, model.__name__)
            continue
        pairs.extend((_contains(column, term), weight) for term in search.terms)
    return pairs


def relevance_score(model: type[SQLModel], search: TextSearch) -> ColumnElement:
    """Sum of weights of the (term, field) pairs that match."""
    pairs = _search_pairs(model, search)
    if not pairs:
        return literal(0)
    return reduce(operator.add, (case((clause, weight), else_=0) for clause, weight in pairs))


def compile_condition(model: type[SQLModel], condition: Condition) -> Optional[ColumnElement]:
    """Translate one condition into a SQL clause; None when it cannot apply to this model."""
    if isinstance(condition, TextSearch):
        pairs = _search_pairs(model, condition)
        return or_(*(clause for clause, _ in pairs)) if pairs else None

    if isinstance(condition, HasAnyTag):
        link = TAG_LINKS.get(model)
        if link is None:
            return None
        owner, tag = link
        return model.id.in_(select(owner).where(tag.in_(condition.values)))

    column = column_for(model, condition.field)
    if column is None:
        logger.debug("Dropping condition on unknown field %r of %s", condition.field, model.__name__)
        return None
    if isinstance(condition, Equals):
        return column == condition.value
    if isinstance(condition, AnyOf):
        return column.in_(condition.values)
    if isinstance(condition, DateRange):
        bounds = []
        if condition.start is not None:
            bounds.append(column >= condition.start)
        if condition.end is not None:
            bounds.append(column <= condition.end)
        return and_(*bounds) if bounds else None
    return None


def where_clauses(model: type[SQLModel], spec: QuerySpec) -> list[ColumnElement]:
    clauses = (compile_condition(model, c) for c in spec.filter.conditions)
    return [c for c in clauses if c is not None]


def order_clauses(model: type[SQLModel], spec: QuerySpec) -> list[ColumnElement]:
    """Sort keys in QuerySpec order, then id ascending so page boundaries are stable."""
    search = spec.filter.text_search
    ordering = []
    for key in spec.sort:
        if key.field == RELEVANCE:
            if search is None:
                continue
            expr = relevance_score(model, search)
        else:
            expr = column_for(model, key.field)
            if expr is None:
                logger.debug("Ignoring sort on unknown field %r of %s", key.field, model.__name__)
                continue
        ordering.append(expr.desc() if key.direction == SortDirection.desc else expr.asc())
    ordering.append(model.id.asc())
    return ordering


def find(session: Session, spec: QuerySpec) -> list[SQLModel]:
    model = MODELS[spec.kind]
    stmt = (
        select(model)
        .where(*where_clauses(model, spec))
        .order_by(*order_clauses(model, spec))
        .offset(spec.skip)
        .limit(spec.limit)
    )
    return list(session.exec(stmt).all())


def count(session: Session, spec: QuerySpec) -> int:
    model = MODELS[spec.kind]
    stmt = select(func.count()).select_from(model).where(*where_clauses(model, spec))
    return session.exec(stmt).one()


def run_listing(session: Session, spec: QuerySpec) -> ListingPage:
    """Run the page query and the total count with the same predicate."""
    rows = find(session, spec)
    total = count(session, spec)
    return ListingPage(
        count=len(rows),
        total=total,
        pagination=paginate_spec(spec, total),
        data=rows,
    )
