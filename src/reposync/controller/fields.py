"""Listing parameters for S3 requests."""

from __future__ import annotations

DELIMITER: str = "/"

PAGE_SIZE: int = 1000
