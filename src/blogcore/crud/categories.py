"""Category persistence and the SQL-backed category resolver"""

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, or_, select

from blogcore.core.errors import ContentError
from blogcore.core.query.compose import looks_like_id
from blogcore.core.utils.slug import slugify
from blogcore.crud.listing import LIKE_ESCAPE, escape_like
from blogcore.crud.models import Category


class SqlCategoryResolver:
    """Resolve a category token by exact id, then exact slug, then case-insensitive name fragment."""

    def __init__(self, session: Session):
        self.session = session

    def resolve(self, token: str) -> Optional[str]:
        token = token.strip()
        if not token:
            return None
        if looks_like_id(token):
            category = self.session.get(Category, token.lower())
            if category:
                return category.id

        by_slug = self.session.exec(select(Category.id).where(Category.slug == token.lower())).first()
        if by_slug:
            return by_slug

        pattern = f"%{escape_like(token.lower())}%"
        return self.session.exec(
            select(Category.id)
            .where(func.lower(Category.name).like(pattern, escape=LIKE_ESCAPE))
            .order_by(Category.order, Category.name)
        ).first()


def get_by_slug(session: Session, slug: str) -> Category | None:
    """Return the Category with the given slug, or None if not found."""
    return session.exec(select(Category).where(Category.slug == slug.lower())).first()


def create_category(
    session: Session,
    name: str,
    slug: str | None = None,
    description: str | None = None,
    color: str | None = None,
    is_active: bool = True,
    order: int = 0,
    ) -> Category:
    """Insert a category; raises ContentError on a blank or duplicate name/slug.

    Flushes but does not commit; caller controls the transaction.
    """
    name = name.strip()
    if len(name) < 2:
        raise ContentError("Category name must be at least 2 characters long")
    slug = slugify(slug or name)
    clash = session.exec(
        select(Category).where(or_(Category.slug == slug, func.lower(Category.name) == name.lower()))
    ).first()
    if clash:
        raise ContentError(f"Category '{name}' already exists")

    category = Category(
        name=name,
        slug=slug,
        description=description,
        is_active=is_active,
        order=order,
        **({"color": color} if color else {}),
    )
    session.add(category)
    session.flush()
    return category
