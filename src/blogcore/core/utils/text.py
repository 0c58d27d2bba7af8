"""Plain-text flattening of content blocks for word counts and text search"""

import math
from collections.abc import Iterable
from typing import Any

from blogcore.core.models import ContentBlock


WORDS_PER_MINUTE = 200


def _flatten(value: Any) -> Iterable[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, dict):
        for v in value.values():
            yield from _flatten(v)
    elif isinstance(value, (list, tuple)):
        for v in value:
            yield from _flatten(v)


def block_text(blocks: Iterable[ContentBlock]) -> str:
    """Join every string found in block data, in render order."""
    ordered = sorted(blocks, key=lambda b: b.order)
    return " ".join(s for b in ordered for s in _flatten(b.data) if s.strip())


def word_count(*texts: str) -> int:
    return sum(len(t.split()) for t in texts if t)


def read_time(words: int) -> int:
    """Minutes to read at WORDS_PER_MINUTE, rounded up."""
    return math.ceil(words / WORDS_PER_MINUTE)
