"""Post persistence: merging a decoded form into a create/update, slugs, derived stats, tags"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from blogcore.config import POST_STATUSES, PRIORITIES
from blogcore.core.errors import ContentError
from blogcore.core.models import DecodedDocument
from blogcore.core.query.params import parse_date
from blogcore.core.utils.coerce import parse_bool
from blogcore.core.utils.slug import slugify
from blogcore.core.utils.text import block_text, read_time, word_count
from blogcore.core.validate import validate_blocks
from blogcore.crud.models import Category, Post, PostTag, Tag


def get_by_id(session: Session, post_id: str) -> Post | None:
    return session.get(Post, post_id)


def get_by_slug(session: Session, slug: str) -> Post | None:
    """Return the Post with the given slug, or None if not found."""
    return session.exec(select(Post).where(Post.slug == slug)).first()


def slug_available(session: Session, slug: str, exclude_id: str | None = None) -> bool:
    stmt = select(Post.id).where(Post.slug == slug)
    if exclude_id:
        stmt = stmt.where(Post.id != exclude_id)
    return session.exec(stmt).first() is None


def _field(fields: dict[str, Any], name: str) -> Optional[str]:
    """Last submitted value of a plain form field, stripped; None if absent or blank."""
    value = fields.get(name)
    if isinstance(value, (list, tuple)):
        value = value[-1] if value else None
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _choice(fields: dict[str, Any], name: str, choices: list[str]) -> Optional[str]:
    value = _field(fields, name)
    if value is not None and value not in choices:
        raise ContentError(f"{name} must be one of: {', '.join(choices)}")
    return value


def _set_tags(session: Session, post: Post, tags: Iterable[str]) -> None:
    """Replace the post's tags with the trimmed, lower-cased names."""
    names = sorted({t.strip().lower() for t in tags if t.strip()})
    post.tags = [session.get(Tag, name) or Tag(name=name) for name in names]


def _seo_payload(document: DecodedDocument) -> dict[str, Any]:
    seo = document.seo.model_dump(exclude_none=True)
    if "keywords" in seo:
        seo["keywords"] = sorted({k.strip().lower() for k in seo["keywords"] if k.strip()})
    return seo


def _apply_document(session: Session, post: Post, document: DecodedDocument) -> None:
    """Copy the structured parts the form actually carried onto the post."""
    supplied = document.model_fields_set
    if "blocks" in supplied:
        post.blocks = [b.model_dump() for b in document.blocks]
        post.body_text = block_text(document.blocks)
    if "faqs" in supplied:
        post.faqs = [f.model_dump(by_alias=True) for f in document.faqs]
    if "seo" in supplied:
        post.seo = _seo_payload(document)
    if "tags" in supplied:
        _set_tags(session, post, document.tags)


def _apply_fields(session: Session, post: Post, fields: dict[str, Any]) -> None:
    """Copy scalar form fields that were supplied; raises ContentError on invalid values."""
    if (title := _field(fields, "title")) is not None:
        post.title = title
    if "excerpt" in fields:
        post.excerpt = _field(fields, "excerpt")
    if (category_id := _field(fields, "category")) is not None:
        if session.get(Category, category_id) is None:
            raise ContentError("Invalid category")
        post.category_id = category_id
    if (status := _choice(fields, "status", POST_STATUSES)) is not None:
        post.status = status
    if (priority := _choice(fields, "priority", PRIORITIES)) is not None:
        post.priority = priority
    if (featured := _field(fields, "isFeatured")) is not None:
        post.is_featured = bool(parse_bool(featured))
    if (language := _field(fields, "language")) is not None:
        post.language = language
    if (scheduled := _field(fields, "scheduledAt")) is not None:
        when = parse_date(scheduled)
        if when is None:
            raise ContentError("Scheduled date must be a valid ISO date")
        post.scheduled_at = when


def check_slug(session: Session, text: str, exclude_id: str | None = None) -> tuple[str, Optional[str]]:
    """Slugify text and return (slug, problem); problem is None when the slug can be taken."""
    slug = slugify(text)
    if not slug:
        return slug, "Slug must contain at least one letter or digit"
    if not slug_available(session, slug, exclude_id=exclude_id):
        return slug, "Slug already exists. Please choose a different slug."
    return slug, None


def _apply_slug(session: Session, post: Post, fields: dict[str, Any], title_changed: bool) -> None:
    """An explicit slug is slugified and must be unique; otherwise follow the title."""
    explicit = _field(fields, "slug")
    if explicit is None and post.slug and not title_changed:
        return
    slug, problem = check_slug(session, explicit or post.title, exclude_id=post.id)
    if problem:
        raise ContentError(problem)
    post.slug = slug


def _refresh_derived(post: Post) -> None:
    post.word_count = word_count(post.title, post.excerpt or "", post.body_text)
    post.read_time = read_time(post.word_count)
    if post.status == "published" and post.published_at is None:
        post.published_at = datetime.now()
    post.updated_at = datetime.now()


def create_post(
    session: Session,
    document: DecodedDocument,
    author_id: str | None = None,
    featured_image: dict[str, Any] | None = None,
    ) -> Post:
    """Create a post from a decoded form. Raises BlockValidationError or ContentError.

    Flushes but does not commit; caller controls the transaction.
    """
    validate_blocks(document.blocks)
    fields = document.fields
    if _field(fields, "title") is None:
        raise ContentError("Blog title is required")
    if _field(fields, "category") is None:
        raise ContentError("Invalid category")

    post = Post(title="", slug="", category_id="", author_id=author_id, featured_image=featured_image)
    _apply_fields(session, post, fields)
    _apply_document(session, post, document)
    _apply_slug(session, post, fields, title_changed=True)
    _refresh_derived(post)
    session.add(post)
    session.flush()
    return post


def update_post(
    session: Session,
    post: Post,
    document: DecodedDocument,
    featured_image: dict[str, Any] | None = None,
    ) -> Post:
    """Apply only the parts of a decoded form that were supplied. Raises BlockValidationError or ContentError."""
    if "blocks" in document.model_fields_set:
        validate_blocks(document.blocks)
    old_title = post.title
    _apply_fields(session, post, document.fields)
    _apply_document(session, post, document)
    _apply_slug(session, post, document.fields, title_changed=post.title != old_title)
    if featured_image is not None:
        post.featured_image = featured_image
    _refresh_derived(post)
    session.add(post)
    session.flush()
    return post


def delete_post(session: Session, post: Post) -> None:
    """Delete a post and its tag links. Flushes but does not commit."""
    session.delete(post)
    session.flush()


def post_tags(post: Post) -> list[str]:
    return sorted(t.name for t in post.tags)


def popular_tags(session: Session, limit: int = 20) -> list[tuple[str, int]]:
    """Tag names with their published-post counts, most used first."""
    uses = func.count(PostTag.post_id)
    stmt = (
        select(PostTag.tag_name, uses)
        .join(Post, Post.id == PostTag.post_id)
        .where(Post.status == "published")
        .group_by(PostTag.tag_name)
        .order_by(uses.desc(), PostTag.tag_name)
        .limit(limit)
    )
    return [(name, n) for name, n in session.exec(stmt).all()]
