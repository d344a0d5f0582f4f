"""Plan operation model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .actions import Action


@dataclass(slots=True, frozen=True)
class PlanOperation:
    """A single per-package operation within a SyncPlan."""

    op_id: str
    seq: int
    action: Action
    package: str

    reason: Optional[str] = None

    def validate_required_fields(self) -> None:
        """Validate required fields according to action. Raises ValueError."""
        _require(self.package, "package")
        if self.action is Action.IGNORE:
            _require(self.reason, "reason")
            return
        if self.action in (Action.ADD, Action.UPDATE, Action.REMOVE, Action.UP_TO_DATE):
            return

        raise ValueError(f"Unsupported action: {self.action}")


def _require(value: object, field_name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing required field: {field_name}")
