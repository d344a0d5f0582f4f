"""Translation between manifest dist URLs and repository object keys."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional

from reposync.config.location import GENERIC_REGION, STORAGE_DOMAIN


@lru_cache(maxsize=32)
def _dist_url_pattern(bucket: str, region: str, prefix: str) -> re.Pattern[str]:
    # Old manifests carry the region-less 's3' host, so it always matches too.
    return re.compile(
        re.escape(f"https://{bucket}.")
        + f"(?:{re.escape(region)}|{re.escape(GENERIC_REGION)})"
        + re.escape(f".{STORAGE_DOMAIN}/{prefix}")
        + "(.+)"
    )


def extract_key(url: str, bucket: str, region: str, prefix: str) -> Optional[str]:
    """
    Return the object key a dist URL refers to within bucket/region/prefix.

    Returns:
        The key (URL suffix after the prefix), or None when the URL points
        somewhere else.
    """
    if not isinstance(url, str) or not url:
        return None
    match = _dist_url_pattern(bucket, region, prefix).fullmatch(url)
    if match is None:
        return None
    return match.group(1)


def rewrite_url(key: str, bucket: str, region: str, prefix: str) -> str:
    """Build the canonical dist URL for key in bucket/region/prefix."""
    if not key:
        raise ValueError("key must be a non-empty string")
    return f"https://{bucket}.{region}.{STORAGE_DOMAIN}/{prefix}{key}"
