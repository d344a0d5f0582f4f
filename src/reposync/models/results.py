"""Result models for apply/sync runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional


OperationStatus = Literal["success", "failed", "skipped"]
SyncStatus = Literal["success", "failed"]


class Stage(str, Enum):
    """Stages of apply_plan, in the order they must complete."""

    TRANSFER = "TRANSFER"
    INDEX = "INDEX"
    CLEANUP = "CLEANUP"


@dataclass(slots=True)
class OperationResult:
    """Result for a single operation (PlanOperation)."""

    op_id: str
    seq: int
    action: str
    package: str
    status: OperationStatus

    artifact_key: Optional[str] = None
    url_rewritten: bool = False

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None


@dataclass(slots=True)
class ExecutionReport:
    """
    Aggregate result of apply_plan.

    copied_keys and queued_removals carry state between the transfer and
    cleanup stages; removal_failures maps artifact key -> error message.
    """

    status: SyncStatus
    stopped_op_id: Optional[str]
    results: list[OperationResult]

    copied_keys: list[str] = field(default_factory=list)
    queued_removals: list[str] = field(default_factory=list)
    removed_artifacts: list[str] = field(default_factory=list)
    removal_failures: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    written_manifests: list[str] = field(default_factory=list)
    removed_manifests: list[str] = field(default_factory=list)

    index_published: bool = False
    index_url: Optional[str] = None
    error_message: Optional[str] = None
    stages: list[Stage] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)
