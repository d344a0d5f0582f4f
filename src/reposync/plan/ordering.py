"""Apply ordering rules for SyncPlan operations."""

from __future__ import annotations

from typing import Iterable

from .actions import TRANSFER_ACTIONS, Action
from .operation import PlanOperation


def build_apply_order(
    operations: Iterable[PlanOperation],
    *,
    include_removals: bool = True,
) -> list[str]:
    """
    Build apply_order from operations.

    Rules:
        - Only ADD, UPDATE and REMOVE are executable; IGNORE and UP_TO_DATE
          never appear.
        - All ADD/UPDATE operations come before any REMOVE, so a removal can
          see every artifact key copied in the same run.
        - Within each group: seq ascending.
    """
    ops = sorted(operations, key=lambda op: op.seq)
    transfers = [op for op in ops if op.action in TRANSFER_ACTIONS]
    removals = [op for op in ops if op.action is Action.REMOVE] if include_removals else []
    return [op.op_id for op in transfers + removals]
