"""Lenient readers for raw listing query params; malformed values read as None"""

import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from blogcore.core.query.models import SortDirection, SortKey


Params = Mapping[str, Any]

CAMEL_RE = re.compile(r'(?<!^)(?=[A-Z])')


def first(params: Params, name: str) -> Optional[str]:
    """Return the stripped value of a param (first one if repeated), or None if absent or blank."""
    value = params.get(name)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def split_csv(value: Optional[str]) -> list[str]:
    """Split a comma-separated value into unique non-empty tokens, keeping their order."""
    if not value:
        return []
    return list(dict.fromkeys(t.strip() for t in value.split(',') if t.strip()))


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime; None if absent or malformed."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def parse_sort(value: Optional[str]) -> Optional[SortKey]:
    """Parse 'field:direction'; direction 'desc' sorts descending, anything else ascending."""
    if not value:
        return None
    name, _, direction = value.partition(':')
    name = name.strip()
    if not name:
        return None
    return SortKey(name, SortDirection.desc if direction.strip() == 'desc' else SortDirection.asc)


def to_snake(name: str) -> str:
    """publishedAt -> published_at; snake_case names are returned unchanged."""
    return CAMEL_RE.sub('_', name).lower()
