"""Dependency wiring for the FastAPI app"""

import hmac
from collections.abc import Iterator
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlmodel import Session

from blogcore.api.assets import AssetStore
from blogcore.config import Settings
from blogcore.crud import database


ADMIN_ID = "admin"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session(request: Request) -> Iterator[Session]:
    """One session per request; uncommitted work is rolled back when the request ends."""
    yield from database.get_session(request.app.state.engine)


def get_asset_store(request: Request) -> AssetStore:
    return request.app.state.assets


def require_admin(
    x_admin_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    ) -> str:
    """Gate admin routes on the X-Admin-Token header; returns the acting admin id."""
    if not settings.admin_token or not x_admin_token:
        raise HTTPException(status_code=403, detail="Admin access required")
    if not hmac.compare_digest(x_admin_token, settings.admin_token):
        raise HTTPException(status_code=403, detail="Admin access required")
    return ADMIN_ID
