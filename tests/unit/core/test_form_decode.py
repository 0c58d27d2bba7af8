"""Unit tests for core/decode/form.py"""

import logging

import pytest

from blogcore.core.decode.form import decode_form, keyword_set
from blogcore.core.models import ContentBlock


def test_decode_heading_and_paragraph():
    """Bracket block fields group by index, legacy text becomes content, level becomes an int."""
    doc = decode_form({
        "blocks[0][type]": "heading",
        "blocks[0][data][text]": "Hi",
        "blocks[0][data][level]": "2",
        "blocks[1][type]": "paragraph",
        "blocks[1][data][content]": "Body",
    })
    assert doc.blocks == [
        ContentBlock(type="heading", data={"content": "Hi", "level": 2}, order=0),
        ContentBlock(type="paragraph", data={"content": "Body"}, order=1),
    ]


def test_block_indices_sort_numerically():
    """blocks[9] comes before blocks[10]."""
    doc = decode_form({
        "blocks[10][type]": "paragraph",
        "blocks[10][data][content]": "ten",
        "blocks[9][type]": "paragraph",
        "blocks[9][data][content]": "nine",
    })
    assert [b.data["content"] for b in doc.blocks] == ["nine", "ten"]
    assert [b.order for b in doc.blocks] == [9, 10]


def test_sparse_indices_keep_relative_order():
    """Gaps in block indices are not filled in."""
    doc = decode_form({"blocks[3][type]": "quote", "blocks[0][type]": "code"})
    assert [b.type for b in doc.blocks] == ["code", "quote"]


def test_explicit_order_wins_over_index():
    """A parseable order field replaces the index default; an unparseable one falls back."""
    doc = decode_form({
        "blocks[0][type]": "paragraph",
        "blocks[0][order]": "5",
        "blocks[1][type]": "paragraph",
        "blocks[1][order]": "soon",
    })
    assert [b.order for b in doc.blocks] == [5, 1]


def test_order_zero_is_kept():
    """order '0' parses as 0 rather than falling back to the index."""
    doc = decode_form({"blocks[2][type]": "paragraph", "blocks[2][order]": "0"})
    assert doc.blocks[0].order == 0


def test_array_data_fields_accumulate():
    """data[items][] collects every submitted value in order."""
    doc = decode_form({
        "blocks[0][type]": "list",
        "blocks[0][data][items][]": ["one", "two", "three"],
    })
    assert doc.blocks[0].data["items"] == ["one", "two", "three"]


def test_single_array_value_is_wrapped():
    """A lone data[items][] value still decodes to a list."""
    doc = decode_form({"blocks[0][type]": "list", "blocks[0][data][items][]": "only"})
    assert doc.blocks[0].data["items"] == ["only"]


def test_block_settings_are_grouped():
    """settings[...] keys land in the block's settings map."""
    doc = decode_form({
        "blocks[0][type]": "image",
        "blocks[0][data][url]": "https://x/y.png",
        "blocks[0][settings][align]": "center",
    })
    assert doc.blocks[0].settings == {"align": "center"}


def test_repeated_scalar_keeps_last_value():
    """A repeated scalar block field resolves to its last value."""
    doc = decode_form({"blocks[0][type]": ["paragraph", "quote"]})
    assert doc.blocks[0].type == "quote"


def test_tags_collapse_to_set():
    """Repeated tags[] values collapse into a set."""
    doc = decode_form({"tags[]": ["python", "web", "python"]})
    assert doc.tags == {"python", "web"}


def test_single_tag_is_wrapped():
    """A scalar tags[] value becomes a one-element set."""
    assert decode_form({"tags[]": "solo"}).tags == {"solo"}


def test_json_tags_merge_with_bracket_tags():
    """A JSON tags array unions with tags[] values."""
    doc = decode_form({"tags": '["a", "b"]', "tags[]": ["b", "c"]})
    assert doc.tags == {"a", "b", "c"}


@pytest.mark.parametrize("raw,expected", [
    ("news", {"news"}),
    ("a, b,,c", {"a", "b", "c"}),
])
def test_plain_tags_string_is_split(raw, expected):
    """A tags value that is not JSON is read as a comma-separated list, not dropped."""
    doc = decode_form({"tags": raw})
    assert doc.tags == expected
    assert "tags" in doc.model_fields_set
    assert "tags" not in doc.fields


def test_json_blocks_are_decoded_and_normalized():
    """A JSON-serialized blocks array is parsed and normalized."""
    doc = decode_form({"blocks": '[{"type": "code", "data": {"code": "x = 1"}}, "junk"]'})
    assert doc.blocks == [ContentBlock(type="code", data={"content": "x = 1"}, order=0)]


def test_bracket_blocks_win_over_json_blocks():
    """When both forms are submitted the bracket blocks are used."""
    doc = decode_form({
        "blocks": '[{"type": "quote", "data": {"content": "json"}}]',
        "blocks[0][type]": "paragraph",
        "blocks[0][data][content]": "bracket",
    })
    assert [b.data["content"] for b in doc.blocks] == ["bracket"]


def test_unparseable_json_field_passes_through(caplog):
    """A JSON field that does not parse is kept verbatim and a warning is logged."""
    with caplog.at_level(logging.WARNING):
        doc = decode_form({"blocks": "[not json"})
    assert doc.fields["blocks"] == "[not json"
    assert "blocks" not in doc.model_fields_set
    assert "blocks" in caplog.text


def test_faqs_group_by_index():
    """faqs[i][...] fields become ordered FaqEntry records with defaults."""
    doc = decode_form({
        "faqs[1][question]": "Second?",
        "faqs[1][answer]": "Yes",
        "faqs[1][isActive]": "false",
        "faqs[0][question]": "First?",
        "faqs[0][answer]": "No",
    })
    assert [f.question for f in doc.faqs] == ["First?", "Second?"]
    assert [f.order for f in doc.faqs] == [0, 1]
    assert doc.faqs[0].is_active is True
    assert doc.faqs[1].is_active is False


def test_seo_fields_merge_over_json_seo():
    """seo[...] keys overlay a JSON seo object."""
    doc = decode_form({
        "seo": '{"title": "Base", "description": "Desc"}',
        "seo[title]": "Override",
        "seo[canonical]": "https://example.test/a",
    })
    assert doc.seo.title == "Override"
    assert doc.seo.description == "Desc"
    assert doc.seo.model_extra == {"canonical": "https://example.test/a"}


@pytest.mark.parametrize("raw,expected", [
    ('["a", "b", "a"]', {"a", "b"}),
    ("a, b ,c", {"a", "b", "c"}),
    ("single", {"single"}),
    (["x", "y"], {"x", "y"}),
    ('{"not": "array"}', {'{"not": "array"}'}),
])
def test_keyword_set(raw, expected):
    """keywords parse as a JSON array, else split on commas."""
    assert keyword_set(raw) == expected


def test_seo_keyword_array_accumulates():
    """seo[keywords][] values accumulate into the keyword set."""
    doc = decode_form({"seo[keywords][]": ["blog", "cms"]})
    assert doc.seo.keywords == {"blog", "cms"}


def test_unrecognised_fields_pass_through():
    """Plain and malformed keys are left in fields untouched."""
    doc = decode_form({
        "title": "Hello",
        "blocks[x][type]": "paragraph",
        "blocks[0][oops]": "?",
        "weird[": "1",
    })
    assert doc.fields == {
        "title": "Hello",
        "blocks[x][type]": "paragraph",
        "blocks[0][oops]": "?",
        "weird[": "1",
    }
    assert doc.blocks == []


def test_only_present_parts_are_marked_set():
    """model_fields_set names exactly the parts the form carried."""
    doc = decode_form({"title": "x", "tags[]": "a"})
    assert doc.model_fields_set == {"tags", "fields"}


def test_empty_form_decodes_to_empty_document():
    """An empty form never raises."""
    doc = decode_form({})
    assert doc.blocks == [] and doc.tags == set() and doc.faqs == []
