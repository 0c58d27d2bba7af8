"""Block data normalization reconciling the two historical authoring conventions"""

from typing import Any

from blogcore.core.utils.coerce import parse_int


LEGACY_CONTENT_FIELDS = ('text', 'code')


def normalize_block_data(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of data with text/code renamed to content and a textual level made an int.

    A rename only happens while content is absent, so applying this twice is a no-op.
    """
    out = dict(data)
    for legacy in LEGACY_CONTENT_FIELDS:
        if legacy in out and 'content' not in out:
            out['content'] = out.pop(legacy)

    level = out.get('level')
    if isinstance(level, str):
        coerced = parse_int(level)
        if coerced is not None:
            out['level'] = coerced
    return out
