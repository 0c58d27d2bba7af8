"""Asset storage for uploaded images: the protocol the write path needs and an in-memory store"""

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Protocol

from pydantic import BaseModel

from blogcore.crud.models import new_id


class UploadedAsset(BaseModel):
    public_id: str
    url: str


class AssetStore(Protocol):
    """Defines the operations the write endpoints need from asset storage."""

    def upload(self, filename: str, content: bytes, folder: str = "blog") -> UploadedAsset:
        ...

    def delete(self, public_id: str) -> None:
        """Remove a stored asset; unknown ids are ignored."""
        ...


@dataclass
class InMemoryAssetStore:
    """Keeps uploads in a dict; the default store and the test double."""

    base_url: str = "https://assets.example.test"
    stored: dict[str, bytes] = field(default_factory=dict)

    def upload(self, filename: str, content: bytes, folder: str = "blog") -> UploadedAsset:
        public_id = f"{folder}/{new_id()}{PurePath(filename).suffix.lower()}"
        self.stored[public_id] = content
        return UploadedAsset(public_id=public_id, url=f"{self.base_url.rstrip('/')}/{public_id}")

    def delete(self, public_id: str) -> None:
        self.stored.pop(public_id, None)
