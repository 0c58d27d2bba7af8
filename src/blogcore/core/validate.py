"""Content block validation against per-type data rules"""

from collections.abc import Callable, Sequence
from typing import Any, Optional

from blogcore.core.errors import BlockValidationError
from blogcore.core.models import BlockKind, ContentBlock


HEADING_LEVELS = range(1, 7)

Rule = Callable[[dict[str, Any]], Optional[str]]


def _has_text(data: dict[str, Any], name: str) -> bool:
    value = data.get(name)
    return isinstance(value, str) and bool(value.strip())


def _text_block(label: str) -> Rule:
    def rule(data: dict[str, Any]) -> Optional[str]:
        if not _has_text(data, 'content'):
            return f"{label} block must have content"
        return None
    return rule


def _url_block(label: str) -> Rule:
    def rule(data: dict[str, Any]) -> Optional[str]:
        if not _has_text(data, 'url'):
            return f"{label} block must have a URL"
        return None
    return rule


def _heading(data: dict[str, Any]) -> Optional[str]:
    if not _has_text(data, 'content'):
        return "Heading block must have content"
    level = data.get('level')
    if level is not None and (isinstance(level, bool) or level not in HEADING_LEVELS):
        return "Heading level must be between 1 and 6"
    return None


def _list(data: dict[str, Any]) -> Optional[str]:
    items = data.get('items')
    if not isinstance(items, (list, tuple)) or not items:
        return "List block must have items"
    return None


def _code(data: dict[str, Any]) -> Optional[str]:
    if not isinstance(data.get('content'), str):
        return "Code block must have content"
    return None


# Kinds without an entry here, and unknown type strings, are accepted unchecked.
BLOCK_RULES: dict[BlockKind, Rule] = {
    BlockKind.paragraph: _text_block("Paragraph"),
    BlockKind.heading:   _heading,
    BlockKind.image:     _url_block("Image"),
    BlockKind.list:      _list,
    BlockKind.quote:     _text_block("Quote"),
    BlockKind.code:      _code,
    BlockKind.video:     _url_block("Video"),
}


def check_block(block: ContentBlock) -> Optional[str]:
    """Return the first rule the block breaks, or None if it is valid."""
    if not block.type:
        return "Block type is required"
    rule = BLOCK_RULES.get(block.kind)
    return rule(block.data) if rule else None


def validate_blocks(blocks: Sequence[ContentBlock]) -> None:
    """Raise BlockValidationError for the first invalid block, naming its index and rule."""
    for index, block in enumerate(blocks):
        failure = check_block(block)
        if failure is not None:
            raise BlockValidationError(index, block.type, failure)
