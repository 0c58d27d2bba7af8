"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import SQLModel, Session

from blogcore.core.decode.form import decode_form
from blogcore.crud.categories import create_category
from blogcore.crud.database import init_db, make_engine
from blogcore.crud.posts import create_post


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="category")
def category_fixture(session):
    """A persisted 'Technology' category."""
    return create_category(session, "Technology", description="Tech news")


@pytest.fixture(name="make_post")
def make_post_fixture(session, category):
    """Factory creating a post from flat form fields, defaulting title, category, and one paragraph."""
    def make(**fields):
        form = {
            "title": "Untitled",
            "category": category.id,
            "blocks[0][type]": "paragraph",
            "blocks[0][data][content]": "Body text",
            **fields,
        }
        return create_post(session, decode_form(form), author_id="admin")
    return make
