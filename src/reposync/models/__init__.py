"""Public model exports for reposync."""

from __future__ import annotations

from .manifest import ManifestRecord, dump_manifest
from .results import (
    ExecutionReport,
    OperationResult,
    OperationStatus,
    Stage,
    SyncStatus,
)
from .stored_object import StoredObject

__all__ = [
    "ManifestRecord",
    "StoredObject",
    "dump_manifest",
    "Stage",
    "OperationStatus",
    "SyncStatus",
    "OperationResult",
    "ExecutionReport",
]
