"""Plan actions for reposync."""

from __future__ import annotations

from enum import Enum


class Action(str, Enum):
    """Per-package outcome of reconciliation."""

    ADD = "ADD"
    UPDATE = "UPDATE"
    REMOVE = "REMOVE"
    IGNORE = "IGNORE"
    UP_TO_DATE = "UP_TO_DATE"


TRANSFER_ACTIONS: frozenset[Action] = frozenset({Action.ADD, Action.UPDATE})
EXECUTABLE_ACTIONS: frozenset[Action] = frozenset({Action.ADD, Action.UPDATE, Action.REMOVE})
