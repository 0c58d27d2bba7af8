"""Authored content model: blocks, FAQ entries, SEO record, and the decoded write document"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BlockKind(str, Enum):
    """Block types the front end is known to emit; other type strings are still accepted."""
    paragraph = "paragraph"
    heading = "heading"
    image = "image"
    list = "list"
    quote = "quote"
    code = "code"
    video = "video"
    gallery = "gallery"


class ContentBlock(BaseModel):
    """A single typed content block; required data keys depend on type."""
    type: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    order: int = 0                  # render position; ties keep list position
    settings: dict[str, Any] = Field(default_factory=dict)

    @property
    def kind(self) -> Optional[BlockKind]:
        """The known BlockKind for this block, or None for a type with no schema."""
        try:
            return BlockKind(self.type)
        except ValueError:
            return None


class FaqEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question:  str = ""
    answer:    str = ""
    order:     int = 0
    is_active: bool = Field(default=True, alias="isActive")


class SeoRecord(BaseModel):
    """SEO metadata; unrecognised seo[...] fields are kept as extras."""
    model_config = ConfigDict(extra="allow")

    title:       Optional[str] = None
    description: Optional[str] = None
    keywords:    Optional[set[str]] = None


class DecodedDocument(BaseModel):
    """Form decoder output, merged into a post write and then discarded.

    Only the parts actually present in the form are marked as set, so
    `model_fields_set` tells a partial update which parts to replace.
    """
    tags:   set[str] = Field(default_factory=set)
    blocks: list[ContentBlock] = Field(default_factory=list)
    faqs:   list[FaqEntry] = Field(default_factory=list)
    seo:    SeoRecord = Field(default_factory=SeoRecord)
    fields: dict[str, Any] = Field(default_factory=dict)    # remaining top-level form fields
