"""Next/prev page references derived from skip, limit, and the matched total"""

from blogcore.core.query.models import PageRef, PaginationResult, QuerySpec


def paginate(page: int, limit: int, total: int) -> PaginationResult:
    """next iff more records follow this page; prev iff this is not the first page."""
    skip = (page - 1) * limit
    result = PaginationResult()
    if skip + limit < total:
        result.next = PageRef(page=page + 1, limit=limit)
    if skip > 0:
        result.prev = PageRef(page=page - 1, limit=limit)
    return result


def paginate_spec(spec: QuerySpec, total: int) -> PaginationResult:
    return paginate(spec.page, spec.limit, total)
