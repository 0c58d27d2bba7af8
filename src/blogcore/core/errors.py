"""Errors raised by the content write path"""


class ContentError(ValueError):
    """A write was rejected by a content rule; the message is safe to show the caller."""


class BlockValidationError(ContentError):
    """A content block failed the data schema for its type."""

    def __init__(self, index: int, block_type: str, rule: str):
        self.index = index
        self.block_type = block_type
        self.rule = rule
        super().__init__(f"Block {index} ({block_type or 'untyped'}): {rule}")
