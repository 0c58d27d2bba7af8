"""Integration tests for the Typer CLI"""

import json

import pytest
from typer.testing import CliRunner

from blogcore.cli.cli import app


runner = CliRunner()


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    """Run every command in a scratch directory against its own SQLite file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BLOGCORE_DB_URL", f"sqlite:///{tmp_path}/test.db")
    return tmp_path


def test_init_creates_database(workdir):
    """init reports the database it initialized."""
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0, result.output
    assert "Database initialized" in result.output
    assert (workdir / "test.db").exists()


def test_init_reset_clears_data():
    """init --reset drops existing rows."""
    runner.invoke(app, ["category-add", "Technology"])
    result = runner.invoke(app, ["init", "--reset"])
    assert result.exit_code == 0, result.output
    assert "Existing data cleared." in result.output
    listed = json.loads(runner.invoke(app, ["list", "categories"]).output)
    assert listed["total"] == 0


def test_category_add_then_list():
    """A created category shows up in the categories listing."""
    result = runner.invoke(app, ["category-add", "Web Design", "--order", "2"])
    assert result.exit_code == 0, result.output
    assert "(web-design)" in result.output

    listed = json.loads(runner.invoke(app, ["list", "categories"]).output)
    assert [c["slug"] for c in listed["data"]] == ["web-design"]
    assert listed["pagination"] == {}


def test_category_add_duplicate_fails():
    """A duplicate category prints an error and exits 1."""
    runner.invoke(app, ["category-add", "News"])
    result = runner.invoke(app, ["category-add", "news"])
    assert result.exit_code == 1
    assert "Error: Category 'news' already exists" in result.output


def test_list_accepts_params():
    """-p key=value pairs feed the listing query."""
    runner.invoke(app, ["category-add", "Alpha"])
    runner.invoke(app, ["category-add", "Beta", "--inactive"])
    listed = json.loads(runner.invoke(app, ["list", "categories", "-p", "active=false"]).output)
    assert [c["name"] for c in listed["data"]] == ["Beta"]


def test_list_rejects_malformed_param():
    """A param without '=' is an error."""
    result = runner.invoke(app, ["list", "posts", "-p", "oops"])
    assert result.exit_code == 1
    assert "Expected key=value" in result.output


def test_list_rejects_unknown_resource():
    """Only known listings can be run."""
    assert runner.invoke(app, ["list", "users"]).exit_code != 0


def test_decode_prints_document(workdir):
    """decode turns flat form fields into the structured document."""
    (workdir / "form.json").write_text(json.dumps({
        "title": "Hello",
        "tags[]": ["a", "a"],
        "blocks[10][type]": "paragraph",
        "blocks[10][data][content]": "ten",
        "blocks[9][type]": "heading",
        "blocks[9][data][text]": "nine",
    }))
    result = runner.invoke(app, ["decode", "form.json", "--validate"])
    assert result.exit_code == 0, result.output
    doc = json.loads(result.output)
    assert doc["tags"] == ["a"]
    assert [b["data"]["content"] for b in doc["blocks"]] == ["nine", "ten"]
    assert doc["fields"] == {"title": "Hello"}


def test_decode_validate_reports_block_error(workdir):
    """decode --validate fails on an invalid block."""
    (workdir / "form.json").write_text(json.dumps({"blocks[0][type]": "image"}))
    result = runner.invoke(app, ["decode", "form.json", "--validate"])
    assert result.exit_code == 1
    assert "Block 0 (image): Image block must have a URL" in result.output


def test_decode_missing_file_fails():
    """A missing input file is reported."""
    result = runner.invoke(app, ["decode", "nope.json"])
    assert result.exit_code == 1
    assert "Cannot read form fields" in result.output
