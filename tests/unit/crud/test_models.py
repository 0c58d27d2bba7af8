"""Unit tests for crud/models.py - schema definitions and constraints"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from blogcore.core.query.compose import looks_like_id
from blogcore.crud.models import Category, Contact, Post, PostTag, Tag, new_id


def test_new_id_is_a_direct_reference():
    """Generated ids have the 24-hex shape the composer treats as an id."""
    assert looks_like_id(new_id())
    assert new_id() != new_id()


def test_category_defaults(session, category):
    """A category is active, first in order, with the default colour."""
    assert category.is_active is True
    assert category.order == 0
    assert category.color == "#6366f1"


def test_category_slug_unique(session, category):
    """Category raises IntegrityError on a duplicate slug."""
    session.add(Category(name="Tech two", slug=category.slug))
    with pytest.raises(IntegrityError):
        session.flush()


def test_post_slug_unique(session, make_post):
    """Post raises IntegrityError on a duplicate slug at the table level."""
    post = make_post()
    session.add(Post(title="Other", slug=post.slug, category_id=post.category_id))
    with pytest.raises(IntegrityError):
        session.flush()


def test_post_tags_link_rows(session, make_post):
    """Tags are shared rows joined through post_tags."""
    make_post(title="A", **{"tags[]": ["python"]})
    make_post(title="B", **{"tags[]": ["python", "web"]})
    assert session.exec(select(Tag.name).order_by(Tag.name)).all() == ["python", "web"]
    assert len(session.exec(select(PostTag)).all()) == 3


def test_post_category_relationship(session, make_post, category):
    """A post navigates to its category and back."""
    post = make_post()
    assert post.category is category
    assert post in category.posts


def test_contact_defaults(session):
    """A new contact starts pending, medium priority, unread."""
    contact = Contact(name="A", email="a@b.cd", phone_number="1", product_question="Other", message="m")
    session.add(contact)
    session.flush()
    assert (contact.status, contact.priority, contact.is_read) == ("pending", "medium", False)
