"""Database table definitions for categories, posts, tags, and contact leads"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, String, Text
from sqlmodel import Field, Relationship, SQLModel


def new_id() -> str:
    """24 lowercase hex chars, the id shape the query composer treats as a direct reference."""
    return uuid4().hex[:24]


class Category(SQLModel, table=True):
    """A named grouping of posts, addressable by id, slug, or name"""
    __tablename__ = "categories"
    id: str = Field(default_factory=new_id, primary_key=True, max_length=24)
    name: str = Field(..., sa_column=Column(String(100), nullable=False, unique=True))
    slug: str = Field(..., index=True, unique=True, nullable=False)
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    color: str = Field(default="#6366f1", nullable=False)
    is_active: bool = Field(default=True, index=True, nullable=False)
    order: int = Field(default=0, index=True, nullable=False, description="Manual display position")
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    posts: List["Post"] = Relationship(back_populates="category")


class PostTag(SQLModel, table=True):
    """Many-to-many relationship between posts and tags"""
    __tablename__ = "post_tags"
    post_id: str = Field(foreign_key="posts.id", primary_key=True)
    tag_name: str = Field(foreign_key="tags.name", primary_key=True)


class Tag(SQLModel, table=True):
    """A lower-cased label attached to posts for filtering"""
    __tablename__ = "tags"
    name: str = Field(primary_key=True)
    posts: List["Post"] = Relationship(back_populates="tags", link_model=PostTag)


class Post(SQLModel, table=True):
    """An authored blog post assembled from ordered content blocks"""
    __tablename__ = "posts"
    id: str = Field(default_factory=new_id, primary_key=True, max_length=24)
    title: str = Field(..., sa_column=Column(String(300), nullable=False))
    slug: str = Field(..., index=True, unique=True, nullable=False)
    excerpt: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    category_id: str = Field(..., foreign_key="categories.id", index=True, nullable=False)
    author_id: Optional[str] = Field(default=None, index=True)
    status: str = Field(default="draft", index=True, nullable=False, description="draft, published, or archived")
    priority: str = Field(default="medium", nullable=False)
    is_featured: bool = Field(default=False, index=True, nullable=False)
    blocks: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    faqs: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    seo: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    featured_image: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    body_text: str = Field(default="", sa_column=Column(Text, nullable=False), description="Block text for search")
    views: int = Field(default=0, nullable=False)
    likes: int = Field(default=0, nullable=False)
    word_count: int = Field(default=0, nullable=False)
    read_time: int = Field(default=0, nullable=False, description="Minutes at 200 words per minute")
    language: str = Field(default="en", nullable=False)
    published_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True, index=True))
    scheduled_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    category: Optional[Category] = Relationship(back_populates="posts")
    tags: List[Tag] = Relationship(back_populates="posts", link_model=PostTag)


class Contact(SQLModel, table=True):
    """An inbound contact-form lead awaiting triage"""
    __tablename__ = "contacts"
    id: str = Field(default_factory=new_id, primary_key=True, max_length=24)
    name: str = Field(..., nullable=False)
    email: str = Field(..., index=True, nullable=False)
    phone_number: str = Field(..., sa_column=Column(String(20), nullable=False))
    product_question: str = Field(..., nullable=False)
    message: str = Field(..., sa_column=Column(Text, nullable=False))
    status: str = Field(default="pending", index=True, nullable=False)
    priority: str = Field(default="medium", index=True, nullable=False)
    assigned_to: Optional[str] = Field(default=None, index=True)
    source: str = Field(default="website", nullable=False)
    is_read: bool = Field(default=False, index=True, nullable=False)
    read_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))
    read_by: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
