"""reposync public API."""

from __future__ import annotations

from reposync.config import RepoLocation, SyncSettings
from reposync.controller import S3Controller
from reposync.errors import (
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
from reposync.index import build_index, build_index_from_directory, publish_index
from reposync.manager import RepoSyncManager
from reposync.models import ExecutionReport, ManifestRecord, OperationResult, Stage
from reposync.plan import Action, Comparison, PlanOperation, SyncPlan, build_plan, compare
from reposync.repo import ManifestSet, extract_key, rewrite_url

__all__ = [
    # High-level
    "RepoSyncManager",
    "S3Controller",
    # Config
    "RepoLocation",
    "SyncSettings",
    # Core
    "extract_key",
    "rewrite_url",
    "compare",
    "Comparison",
    "build_plan",
    "build_index",
    "build_index_from_directory",
    "publish_index",
    # Plan / Models
    "Action",
    "PlanOperation",
    "SyncPlan",
    "ManifestRecord",
    "ManifestSet",
    "ExecutionReport",
    "OperationResult",
    "Stage",
    # Errors
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
