"""Query composer: untrusted listing params into a filter predicate, sort order, and page window

Conditions are built in a fixed precedence (visibility, category, tags, date
range, text search, resource scalars) and ANDed. Composition never raises on
bad input: malformed or unresolvable values are dropped and page/limit are
clamped. The only outside call is the category resolver.
"""

import logging
import re
from typing import Optional, Protocol

from blogcore.config import ListingConfig, ScalarFilter, Settings
from blogcore.core.query.models import (
    RELEVANCE, AnyOf, Condition, DateRange, Equals, HasAnyTag, Predicate,
    QuerySpec, ResourceKind, SortDirection, SortKey, TextSearch,
)
from blogcore.core.query.params import Params, first, parse_date, parse_sort, split_csv
from blogcore.core.utils.coerce import parse_bool, parse_int


logger = logging.getLogger(__name__)

OBJECT_ID_RE = re.compile(r'^[0-9a-fA-F]{24}$')
SORT_PARAM = "sortBy"


class CategoryResolver(Protocol):
    def resolve(self, token: str) -> Optional[str]:
        """Return the id of the category matching token (id, slug, or name fragment), else None."""
        ...


def looks_like_id(token: str) -> bool:
    return bool(OBJECT_ID_RE.match(token))


def _visibility(listing: ListingConfig, params: Params, privileged: bool) -> Optional[Condition]:
    rule = listing.visibility
    if rule is None:
        return None
    if rule.enforce_for_all or not privileged:
        return Equals(rule.field, rule.public_value)
    status = first(params, rule.param)
    return Equals(rule.field, status) if status in rule.choices else None


def _category(listing: ListingConfig, params: Params, resolver: Optional[CategoryResolver]) -> Optional[Condition]:
    if not listing.category_param:
        return None
    ids: list[str] = []
    for token in split_csv(first(params, listing.category_param)):
        if looks_like_id(token):
            ids.append(token.lower())
            continue
        resolved = resolver.resolve(token) if resolver else None
        if resolved is None:
            logger.debug("Dropping unresolvable category token %r", token)
            continue
        ids.append(resolved)
    # nothing resolved: no category restriction rather than an empty result
    ids = list(dict.fromkeys(ids))
    return AnyOf(listing.category_field, tuple(ids)) if ids else None


def _tags(listing: ListingConfig, params: Params) -> Optional[Condition]:
    if not listing.tags_param:
        return None
    tags = list(dict.fromkeys(t.lower() for t in split_csv(first(params, listing.tags_param))))
    return HasAnyTag("tags", tuple(tags)) if tags else None


def _date_range(listing: ListingConfig, params: Params) -> Optional[Condition]:
    field = listing.date_field
    if listing.date_field_param:
        field = first(params, listing.date_field_param) or field
    if not field:
        return None
    start = parse_date(first(params, "startDate"))
    end = parse_date(first(params, "endDate"))
    if start is None and end is None:
        return None
    return DateRange(field, start, end)


def _text_search(listing: ListingConfig, params: Params) -> Optional[TextSearch]:
    if not listing.search_param or not listing.search_fields:
        return None
    query = first(params, listing.search_param)
    if not query:
        return None
    terms = tuple(dict.fromkeys(query.lower().split()))
    return TextSearch(query=query, terms=terms, weights=tuple(listing.search_fields.items()))


def _scalar(spec: ScalarFilter, params: Params) -> Optional[Condition]:
    raw = first(params, spec.param)
    if raw is None:
        return Equals(spec.field, spec.default) if spec.default is not None else None
    if spec.kind == "bool":
        value = parse_bool(raw)
    elif spec.kind == "int":
        value = parse_int(raw)
    else:
        value = raw
    if value is None or (spec.choices is not None and value not in spec.choices):
        logger.debug("Dropping malformed %s=%r", spec.param, raw)
        return None
    return Equals(spec.field, value)


def _sort(listing: ListingConfig, params: Params, searching: bool) -> tuple[SortKey, ...]:
    explicit = parse_sort(first(params, SORT_PARAM))
    if explicit:
        return (explicit,)
    if searching and listing.rank_by_relevance:
        keys = [SortKey(RELEVANCE, SortDirection.desc)]
        if listing.recency_field:
            keys.append(SortKey(listing.recency_field, SortDirection.desc))
        return tuple(keys)
    return tuple(k for k in map(parse_sort, listing.default_sort) if k)


def _window(listing: ListingConfig, params: Params) -> tuple[int, int]:
    """Return (page, limit) with page clamped into [1, max_page] and limit into [1, max_limit]."""
    page = parse_int(first(params, "page"))
    if page is None or page < 1:
        page = 1
    page = min(page, listing.max_page)
    limit = parse_int(first(params, "limit"))
    if limit is None:
        limit = listing.default_limit
    return page, max(1, min(limit, listing.max_limit))


def compose(
    kind: ResourceKind | str,
    params: Params,
    privileged: bool = False,
    resolver: Optional[CategoryResolver] = None,
    settings: Optional[Settings] = None,
    ) -> QuerySpec:
    """Compose the QuerySpec for a listing of kind from raw query params."""
    kind = ResourceKind(kind)
    listing = (settings or Settings()).listing(kind)

    search = _text_search(listing, params)
    candidates = [
        _visibility(listing, params, privileged),
        _category(listing, params, resolver),
        _tags(listing, params),
        _date_range(listing, params),
        search,
        *(_scalar(s, params) for s in listing.scalars),
    ]
    conditions: list[Condition] = []
    for c in candidates:
        if c is not None and all(c.field != seen.field for seen in conditions):
            conditions.append(c)

    page, limit = _window(listing, params)
    return QuerySpec(
        kind=kind,
        filter=Predicate(tuple(conditions)),
        sort=_sort(listing, params, search is not None),
        page=page,
        limit=limit,
    )
