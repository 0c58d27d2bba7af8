"""Pydantic request schemas for the JSON endpoints"""

from typing import Optional

from pydantic import BaseModel, Field


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    phoneNumber: str = Field(..., max_length=20)
    productQuestion: str
    message: str = Field(..., min_length=1, max_length=1000)
    source: str = "website"


class ContactTriageRequest(BaseModel):
    status: Optional[str] = None
    priority: Optional[str] = None
    assignedTo: Optional[str] = None


class SlugCheckRequest(BaseModel):
    slug: str = Field(..., min_length=1, max_length=200)
    excludeId: Optional[str] = None
