"""SyncPlan model."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime

from reposync.config.location import RepoLocation
from reposync.repo.manifest_set import ManifestSet

from .actions import Action
from .operation import PlanOperation
from .ordering import build_apply_order


@dataclass(slots=True, frozen=True)
class SyncPlan:
    """A plan that can be reviewed and then applied once."""

    plan_id: str
    created_at: datetime
    source: ManifestSet
    destination: ManifestSet
    operations: tuple[PlanOperation, ...]
    apply_order: tuple[str, ...]

    up_to_date: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    removals_suppressed: bool = False

    @property
    def source_location(self) -> RepoLocation:
        return self.source.location

    @property
    def destination_location(self) -> RepoLocation:
        return self.destination.location

    def packages(self, action: Action) -> list[str]:
        return [op.package for op in self.operations if op.action is action]

    @property
    def adds(self) -> list[str]:
        return self.packages(Action.ADD)

    @property
    def updates(self) -> list[str]:
        return self.packages(Action.UPDATE)

    @property
    def removes(self) -> list[str]:
        return self.packages(Action.REMOVE)

    @property
    def ignores(self) -> list[PlanOperation]:
        return [op for op in self.operations if op.action is Action.IGNORE]

    @property
    def has_changes(self) -> bool:
        """True when applying the plan would mutate the destination."""
        return bool(self.apply_order)

    def without_removals(self) -> SyncPlan:
        """Same plan, but REMOVE operations are no longer executed."""
        return dataclasses.replace(
            self,
            apply_order=tuple(build_apply_order(self.operations, include_removals=False)),
            removals_suppressed=True,
        )
