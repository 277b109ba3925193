"""PendingAction ADT - an operator intent captured but not yet confirmed.

At most one pending action exists at a time. It is created when the console
enters the confirmation dialog and consumed (or discarded) when it leaves.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from tiershift.models import StorageTier


DEFAULT_RESTORE_DAYS = 7


@dataclass(frozen=True)
class TransitionAction:
    """Move the targeted objects to ``target_tier``.

    Attributes:
        target_tier: Destination storage class.
        restore_first: Request a restore for each key before transitioning it.
    """

    target_tier: StorageTier
    restore_first: bool = False
    kind: Literal["TransitionAction"] = "TransitionAction"

    def toggled(self) -> TransitionAction:
        return replace(self, restore_first=not self.restore_first)


@dataclass(frozen=True)
class RestoreAction:
    """Request a temporary restored copy of the targeted objects.

    Attributes:
        days: How long the restored copy stays available.
    """

    days: int = DEFAULT_RESTORE_DAYS
    kind: Literal["RestoreAction"] = "RestoreAction"

    def __post_init__(self) -> None:
        if self.days <= 0:
            raise ValueError(f"Restore days must be positive, got {self.days}")


@dataclass(frozen=True)
class SavePolicyAction:
    """Persist the active mask for the selected bucket with ``target_tier``."""

    target_tier: StorageTier
    kind: Literal["SavePolicyAction"] = "SavePolicyAction"


PendingAction = TransitionAction | RestoreAction | SavePolicyAction
