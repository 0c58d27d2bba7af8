"""Bracket-notation key tokenizer for flat form fields"""

import re


KEY_RE = re.compile(r'^([^\[\]]+)((?:\[[^\[\]]*\])*)$')
SEGMENT_RE = re.compile(r'\[([^\[\]]*)\]')


def split_key(key: str) -> tuple[str, list[str]] | None:
    """Split 'blocks[0][data][items][]' into ('blocks', ['0', 'data', 'items', '']).

    Returns None when the key is not well-formed bracket notation.
    """
    m = KEY_RE.match(key)
    if not m:
        return None
    return m.group(1), SEGMENT_RE.findall(m.group(2))


def parse_index(segment: str) -> int | None:
    """Return segment as a non-negative integer index, else None."""
    if segment.isascii() and segment.isdigit():
        return int(segment)
    return None
