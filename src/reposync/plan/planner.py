"""Reconciliation planner: source set + destination set -> SyncPlan."""

from __future__ import annotations

import logging
from typing import Optional

from reposync.errors import InvalidArgumentError
from reposync.repo.manifest_set import ManifestSet
from reposync.util.ids import new_op_id, new_plan_id
from reposync.util.time import now_utc

from .actions import Action
from .compare import Comparison, compare
from .operation import PlanOperation
from .ordering import build_apply_order
from .sync_plan import SyncPlan

logger = logging.getLogger(__name__)

REASON_MATCH_DEST_NEWER: str = "contents match, destination newer"
REASON_DIFFER_SAME_TIME: str = "contents differ, time fields identical"
REASON_DIFFER_DEST_NEWER: str = "contents differ, destination newer"

# Numbering order of operations within a plan.
_ACTION_RANK: dict[Action, int] = {
    Action.ADD: 0,
    Action.UPDATE: 1,
    Action.REMOVE: 2,
    Action.IGNORE: 3,
}


def classify(comparison: Comparison) -> tuple[Action, Optional[str]]:
    """
    Map a comparison onto an action.

    A destination that is as new as or newer than the source is never
    overwritten: those cases are UP_TO_DATE or IGNORE.
    """
    if comparison.newer == "source":
        return Action.UPDATE, None
    if comparison.newer == "equal":
        if comparison.content_equal:
            return Action.UP_TO_DATE, None
        return Action.IGNORE, REASON_DIFFER_SAME_TIME
    if comparison.content_equal:
        return Action.IGNORE, REASON_MATCH_DEST_NEWER
    return Action.IGNORE, REASON_DIFFER_DEST_NEWER


def build_plan(source: ManifestSet, destination: ManifestSet) -> SyncPlan:
    """
    Compute the actions that bring destination in line with source.

    Includes:
        - plan_id UUID and created_at UTC
        - operations numbered ADD, UPDATE, REMOVE, IGNORE (by package name
          within each), so the same inputs always give the same operations
        - apply_order (transfers before removals)
        - warnings for manifests whose time was substituted
    """
    src_loc, dst_loc = source.location, destination.location
    if (src_loc.bucket, src_loc.prefix) == (dst_loc.bucket, dst_loc.prefix):
        raise InvalidArgumentError(
            "Source and destination are the same repository",
            details={"location": source.location.describe()},
        )

    src_names = source.names()
    dst_names = destination.names()

    decided: list[tuple[Action, str, Optional[str]]] = []
    decided.extend((Action.ADD, name, None) for name in src_names - dst_names)
    decided.extend((Action.REMOVE, name, None) for name in dst_names - src_names)

    up_to_date: list[str] = []
    for name in sorted(src_names & dst_names):
        action, reason = classify(compare(source.get(name), destination.get(name)))
        if action is Action.UP_TO_DATE:
            up_to_date.append(name)
            continue
        if action is Action.IGNORE:
            logger.debug("Ignoring %s (%s)", name, reason)
        decided.append((action, name, reason))

    decided.sort(key=lambda item: (_ACTION_RANK[item[0]], item[1]))
    operations = tuple(
        PlanOperation(op_id=new_op_id(), seq=seq, action=action, package=name, reason=reason)
        for seq, (action, name, reason) in enumerate(decided)
    )

    warnings = [
        f"source manifest {name} has invalid time entry, using mtime"
        for name in source.time_substitutions()
    ] + [
        f"destination manifest {name} has invalid time entry, using mtime"
        for name in destination.time_substitutions()
    ]

    return SyncPlan(
        plan_id=new_plan_id(),
        created_at=now_utc(),
        source=source,
        destination=destination,
        operations=operations,
        apply_order=tuple(build_apply_order(operations)),
        up_to_date=tuple(up_to_date),
        warnings=tuple(warnings),
    )
