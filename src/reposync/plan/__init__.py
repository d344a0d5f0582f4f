"""Public plan exports for reposync."""

from __future__ import annotations

from .actions import EXECUTABLE_ACTIONS, TRANSFER_ACTIONS, Action
from .compare import Comparison, compare
from .operation import PlanOperation
from .ordering import build_apply_order
from .planner import (
    REASON_DIFFER_DEST_NEWER,
    REASON_DIFFER_SAME_TIME,
    REASON_MATCH_DEST_NEWER,
    build_plan,
    classify,
)
from .sync_plan import SyncPlan

__all__ = [
    "Action",
    "TRANSFER_ACTIONS",
    "EXECUTABLE_ACTIONS",
    "Comparison",
    "compare",
    "PlanOperation",
    "SyncPlan",
    "build_apply_order",
    "build_plan",
    "classify",
    "REASON_MATCH_DEST_NEWER",
    "REASON_DIFFER_SAME_TIME",
    "REASON_DIFFER_DEST_NEWER",
]
