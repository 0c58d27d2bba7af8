"""CLI command implementations"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
import uvicorn
from sqlmodel import Session, SQLModel

from blogcore.api.app import create_app
from blogcore.config import Settings, load_config
from blogcore.core.decode.form import decode_form
from blogcore.core.errors import BlockValidationError, ContentError
from blogcore.core.query.compose import compose
from blogcore.core.query.models import ResourceKind
from blogcore.core.validate import validate_blocks
from blogcore.crud.categories import SqlCategoryResolver, create_category
from blogcore.crud.database import init_db, make_engine
from blogcore.crud.listing import run_listing


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _echo_json(payload) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _parse_pairs(pairs: list[str]) -> dict[str, str | list[str]]:
    """key=value strings to a params mapping; a repeated key collects its values."""
    params: dict[str, str | list[str]] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            _fail(f"Expected key=value, got '{pair}'")
        if key not in params:
            params[key] = value
        elif isinstance(params[key], list):
            params[key].append(value)
        else:
            params[key] = [params[key], value]
    return params


def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log at DEBUG level")] = False,
    ):
    """Configure logging before any command runs."""
    level = "DEBUG" if verbose else _settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def decode_cmd(
    path: Annotated[Path, typer.Argument(help="JSON file holding an object of flat form fields")],
    validate: Annotated[bool, typer.Option("--validate", help="Also run block validation")] = False,
    ):
    """Decode flat form fields into a structured document and print it as JSON."""
    try:
        fields = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        _fail(f"Cannot read form fields from {path}", e)
    if not isinstance(fields, dict):
        _fail(f"{path} must hold a JSON object of form fields")

    document = decode_form(fields)
    if validate:
        try:
            validate_blocks(document.blocks)
        except BlockValidationError as e:
            _fail(str(e))
    _echo_json(document.model_dump(mode="json", by_alias=True))


def list_cmd(
    resource: Annotated[ResourceKind, typer.Argument(help="Listing to run")],
    param: Annotated[Optional[list[str]], typer.Option("--param", "-p", help="Query parameter as key=value; repeatable")] = None,
    admin: Annotated[bool, typer.Option("--admin", help="Run as a privileged caller")] = False,
    ):
    """Compose a listing query from parameters, run it, and print the page as JSON."""
    settings = _settings()
    params = _parse_pairs(param or [])
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        spec = compose(resource, params, privileged=admin, resolver=SqlCategoryResolver(session), settings=settings)
        page = run_listing(session, spec)
        _echo_json({
            "success": page.success,
            "count": page.count,
            "total": page.total,
            "pagination": page.pagination.model_dump(exclude_none=True),
            "data": [row.model_dump(mode="json") for row in page.data],
        })


def category_add_cmd(
    name: Annotated[str, typer.Argument(help="Category display name")],
    slug: Annotated[Optional[str], typer.Option("--slug", help="URL slug; derived from the name when omitted")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="Short description")] = None,
    order: Annotated[int, typer.Option("--order", help="Display position")] = 0,
    inactive: Annotated[bool, typer.Option("--inactive", help="Create hidden from public listings")] = False,
    ):
    """Create a category."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        try:
            category = create_category(
                session, name, slug=slug, description=description, is_active=not inactive, order=order,
            )
        except ContentError as e:
            _fail(str(e))
        session.commit()
        typer.echo(f"Created category {category.id} ({category.slug})")


def serve_cmd(
    host: Annotated[str, typer.Option("--host", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", help="Bind port")] = 8000,
    ):
    """Run the HTTP API with uvicorn."""
    uvicorn.run(create_app(_settings()), host=host, port=port)
