"""Aggregate index exports for reposync."""

from __future__ import annotations

from .builder import build_index, build_index_from_directory, publish_index, render_index
from .consistency import check_index_consistency

__all__ = [
    "build_index",
    "build_index_from_directory",
    "render_index",
    "publish_index",
    "check_index_consistency",
]
