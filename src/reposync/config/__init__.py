"""Public config exports for reposync."""

from __future__ import annotations

from .location import GENERIC_REGION, STORAGE_DOMAIN, RepoLocation
from .session import build_s3_client
from .settings import SyncSettings

__all__ = [
    "GENERIC_REGION",
    "STORAGE_DOMAIN",
    "RepoLocation",
    "SyncSettings",
    "build_s3_client",
]
