"""Database engine, schema creation, and session helpers"""

from collections.abc import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import blogcore.crud.models  # noqa: F401  registers tables on SQLModel.metadata


MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def make_engine(db_url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection so every session sees the same data."""
    if not db_url.startswith("sqlite"):
        return create_engine(db_url, echo=False)
    if db_url in MEMORY_URLS:
        return create_engine(db_url, echo=False, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(db_url, echo=False, connect_args={"check_same_thread": False})


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    SQLModel.metadata.create_all(engine)


def get_session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session
