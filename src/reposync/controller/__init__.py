"""Internal controller exports for reposync."""

from __future__ import annotations

from .s3_controller import S3Controller

__all__ = ["S3Controller"]
