"""Data model for objects fetched from S3."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True, frozen=True)
class StoredObject:
    """An object body plus the storage metadata reposync cares about."""

    key: str
    body: bytes
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None
