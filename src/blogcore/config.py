"""Application configuration: settings schema, per-listing query config, and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field

from blogcore.core.query.models import ResourceKind


CONFIG_FILE = "config.yaml"

POST_STATUSES = ["draft", "published", "archived"]
PRIORITIES = ["low", "medium", "high", "urgent"]
CONTACT_STATUSES = ["pending", "in-progress", "resolved", "closed"]


class ScalarFilter(BaseModel):
    """A query param applied as an equality condition only when explicitly supplied."""
    param: str
    field: str
    kind: Literal["str", "bool", "int"] = "str"
    choices: Optional[list[str]] = None
    default: Optional[Any] = Field(default=None, description="Applied when the param is absent")


class VisibilityRule(BaseModel):
    """Forces field=public_value for unprivileged callers (or everyone if enforce_for_all)."""
    field: str = "status"
    param: str = "status"
    public_value: str = "published"
    choices: list[str] = POST_STATUSES
    enforce_for_all: bool = False


class ListingConfig(BaseModel):
    default_limit:     int = Field(default=10, ge=1)
    max_limit:         int = Field(default=50, ge=1)
    max_page:          int = Field(default=1_000_000, ge=1, description="pages past this are clamped to it")
    default_sort:      list[str] = Field(default_factory=list, description="'field:asc|desc' entries")
    recency_field:     Optional[str] = None
    visibility:        Optional[VisibilityRule] = None
    category_param:    Optional[str] = None
    category_field:    str = "category_id"
    tags_param:        Optional[str] = None
    date_field:        Optional[str] = None
    date_field_param:  Optional[str] = None
    search_param:      Optional[str] = "search"
    search_fields:     dict[str, int] = Field(default_factory=dict, description="field -> relevance weight")
    rank_by_relevance: bool = False
    scalars:           list[ScalarFilter] = Field(default_factory=list)


def default_listings() -> dict[ResourceKind, ListingConfig]:
    """Built-in listing configuration for every resource kind."""
    post_search_fields = {"title": 3, "excerpt": 2, "body_text": 1}
    return {
        ResourceKind.posts: ListingConfig(
            default_limit=10, max_limit=50,
            default_sort=["published_at:desc"],
            recency_field="published_at",
            visibility=VisibilityRule(),
            category_param="category",
            tags_param="tags",
            date_field="published_at",
            date_field_param="dateField",
            search_fields=post_search_fields,
            rank_by_relevance=True,
            scalars=[
                ScalarFilter(param="author", field="author_id"),
                ScalarFilter(param="featured", field="is_featured", kind="bool"),
                ScalarFilter(param="priority", field="priority", choices=PRIORITIES),
                ScalarFilter(param="language", field="language"),
            ],
        ),
        ResourceKind.post_search: ListingConfig(
            default_limit=10, max_limit=20,
            recency_field="published_at",
            visibility=VisibilityRule(enforce_for_all=True),
            category_param="category",
            tags_param="tags",
            search_param="q",
            search_fields=post_search_fields,
            rank_by_relevance=True,
        ),
        ResourceKind.categories: ListingConfig(
            default_limit=20, max_limit=100,
            default_sort=["order:asc", "name:asc"],
            recency_field="created_at",
            date_field="created_at",
            search_fields={"name": 1, "description": 1},
            scalars=[ScalarFilter(param="active", field="is_active", kind="bool", default=True)],
        ),
        ResourceKind.contacts: ListingConfig(
            default_limit=10, max_limit=100,
            default_sort=["created_at:desc"],
            recency_field="created_at",
            date_field="created_at",
            search_fields={"name": 1, "email": 1, "phone_number": 1, "message": 1},
            scalars=[
                ScalarFilter(param="status", field="status", choices=CONTACT_STATUSES),
                ScalarFilter(param="priority", field="priority", choices=PRIORITIES),
                ScalarFilter(param="productQuestion", field="product_question"),
                ScalarFilter(param="assignedTo", field="assigned_to"),
                ScalarFilter(param="isRead", field="is_read", kind="bool"),
            ],
        ),
    }


class Settings(BaseModel):
    app_name:       str = "blogcore"
    db_url:         str = "sqlite:///blogcore.db"
    api_prefix:     str = Field(default="/api", description="Mount point for the HTTP routes")
    admin_token:    Optional[str] = Field(default=None, description="X-Admin-Token value; admin routes disabled when unset")
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    asset_base_url: str = Field(default="https://assets.example.test", description="Base URL for stored uploads")
    listings:       dict[ResourceKind, ListingConfig] = Field(default_factory=default_listings)

    def listing(self, kind: ResourceKind | str) -> ListingConfig:
        """Return the listing config for kind, falling back to the built-in default."""
        kind = ResourceKind(kind)
        return self.listings.get(kind) or default_listings()[kind]


_SCALAR_FIELDS = [name for name in Settings.model_fields if name != "listings"]


def _merge_listings(data: dict[str, Any]) -> None:
    """Overlay partial per-resource listing overrides from config.yaml onto the defaults."""
    overrides = data.get("listings")
    if not overrides:
        return
    if not isinstance(overrides, dict):
        raise ValueError(f"Invalid {CONFIG_FILE}: 'listings' must be a mapping")
    merged = {}
    for kind, listing in default_listings().items():
        patch = overrides.get(kind.value) or {}
        merged[kind] = ListingConfig(**{**listing.model_dump(), **patch})
    data["listings"] = merged


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then BLOGCORE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")
        _merge_listings(data)

    for name in _SCALAR_FIELDS:
        if val := os.getenv(f"BLOGCORE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
