"""Repository-side helpers: manifest sets, parsing, dist URL translation."""

from __future__ import annotations

from .dist_url import extract_key, rewrite_url
from .manifest_set import ManifestSet
from .parsing import load_json_object, parse_manifest

__all__ = [
    "ManifestSet",
    "extract_key",
    "rewrite_url",
    "load_json_object",
    "parse_manifest",
]
