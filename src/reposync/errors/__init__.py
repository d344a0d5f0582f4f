"""Public error exports for reposync."""

from __future__ import annotations

from .exceptions import (
    AccessDeniedError,
    ApiError,
    ConsistencyMismatch,
    FetchError,
    InvalidArgumentError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
    RemovalError,
    RepoSyncError,
    S3ErrorInfo,
    TransferError,
    map_s3_error,
)

__all__ = [
    "RepoSyncError",
    "InvalidStateError",
    "InvalidArgumentError",
    "FetchError",
    "NotFoundError",
    "AccessDeniedError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "ParseError",
    "ConsistencyMismatch",
    "TransferError",
    "RemovalError",
    "S3ErrorInfo",
    "map_s3_error",
]
