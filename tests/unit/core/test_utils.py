"""Unit tests for core/utils and core/query/params.py"""

from datetime import datetime

import pytest

from blogcore.core.models import ContentBlock
from blogcore.core.query.models import SortDirection, SortKey
from blogcore.core.query.params import first, parse_date, parse_sort, split_csv, to_snake
from blogcore.core.utils.coerce import parse_bool, parse_int
from blogcore.core.utils.slug import slugify
from blogcore.core.utils.text import block_text, read_time, word_count


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-chrs"),
    ("Café Crème", "cafe-creme"),
    ("", ""),
])
def test_slugify(text, expected):
    """slugify folds to ASCII and produces a lowercase hyphenated slug."""
    assert slugify(text) == expected


@pytest.mark.parametrize("text,max_length,expected", [
    ("alpha beta gamma", 10, "alpha-beta"),
    ("alpha beta gamma", 11, "alpha-beta"),
    ("alpha beta gamma", 16, "alpha-beta-gamma"),
    ("supercalifragilistic", 5, "super"),
])
def test_slugify_trims_at_word_boundary(text, max_length, expected):
    """A long slug is cut back to whole words where possible."""
    assert slugify(text, max_length=max_length) == expected


@pytest.mark.parametrize("value,expected", [
    ("3", 3), (" 7 ", 7), (4, 4), (2.0, 2), (2.5, None), ("x", None), (True, None), (None, None),
])
def test_parse_int(value, expected):
    """parse_int accepts whole numbers only."""
    assert parse_int(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("true", True), ("YES", True), ("1", True), ("off", False), ("0", False), ("nah", None), (False, False),
])
def test_parse_bool(value, expected):
    """parse_bool understands the usual spellings."""
    assert parse_bool(value) is expected


def test_first_reads_first_of_repeated():
    """first strips and takes the first repeated value; blanks read as None."""
    assert first({"a": [" x ", "y"]}, "a") == "x"
    assert first({"a": "   "}, "a") is None
    assert first({}, "a") is None


def test_split_csv_keeps_order_and_drops_blanks():
    """split_csv returns unique tokens in first-seen order."""
    assert split_csv("b, a,,b ,c") == ["b", "a", "c"]
    assert split_csv(None) == []


def test_parse_date():
    """ISO dates parse; anything else is None."""
    assert parse_date("2024-02-03T04:05:06") == datetime(2024, 2, 3, 4, 5, 6)
    assert parse_date("03/02/2024") is None


@pytest.mark.parametrize("value,expected", [
    ("views:desc", SortKey("views", SortDirection.desc)),
    ("title:asc", SortKey("title")),
    ("title", SortKey("title")),
    ("title:sideways", SortKey("title")),
    (":desc", None),
])
def test_parse_sort(value, expected):
    """parse_sort reads field:direction with ascending as the default."""
    assert parse_sort(value) == expected


def test_to_snake():
    """camelCase names map to snake_case."""
    assert to_snake("publishedAt") == "published_at"
    assert to_snake("is_read") == "is_read"


def test_block_text_follows_render_order():
    """block_text joins nested strings from blocks sorted by order."""
    blocks = [
        ContentBlock(type="list", data={"items": ["b1", "b2"]}, order=2),
        ContentBlock(type="heading", data={"content": "Title", "level": 1}, order=0),
    ]
    assert block_text(blocks) == "Title b1 b2"


def test_word_count_and_read_time():
    """Read time rounds up at 200 words per minute."""
    assert word_count("one two", "", "three") == 3
    assert read_time(0) == 0
    assert read_time(1) == 1
    assert read_time(201) == 2
