"""Event ADTs - everything the state machine reacts to.

Two families:
    - Operator commands, produced by the key map from key presses.
    - Backend feedback, produced by the orchestrator when a fetch completes.

Whether a command does anything depends on the current mode; the state machine
ignores commands that have no meaning in that mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tiershift.models import BucketInfo, ObjectInfo
from tiershift.policy import MigrationPolicy


# ---------------------------------------------------------------------------
# Browsing commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NextPane:
    kind: Literal["NextPane"] = "NextPane"


@dataclass(frozen=True)
class PreviousPane:
    kind: Literal["PreviousPane"] = "PreviousPane"


@dataclass(frozen=True)
class MoveSelection:
    """Move the highlight of the focused list (or the tier picker) by ``delta``."""

    delta: int
    kind: Literal["MoveSelection"] = "MoveSelection"


@dataclass(frozen=True)
class JumpSelection:
    to_start: bool
    kind: Literal["JumpSelection"] = "JumpSelection"


@dataclass(frozen=True)
class LoadSelectedBucket:
    kind: Literal["LoadSelectedBucket"] = "LoadSelectedBucket"


@dataclass(frozen=True)
class RefreshBuckets:
    kind: Literal["RefreshBuckets"] = "RefreshBuckets"


@dataclass(frozen=True)
class InspectObject:
    kind: Literal["InspectObject"] = "InspectObject"


@dataclass(frozen=True)
class StartMaskEdit:
    kind: Literal["StartMaskEdit"] = "StartMaskEdit"


@dataclass(frozen=True)
class ClearMask:
    kind: Literal["ClearMask"] = "ClearMask"


@dataclass(frozen=True)
class BeginTransition:
    kind: Literal["BeginTransition"] = "BeginTransition"


@dataclass(frozen=True)
class BeginRestore:
    kind: Literal["BeginRestore"] = "BeginRestore"


@dataclass(frozen=True)
class BeginSavePolicy:
    kind: Literal["BeginSavePolicy"] = "BeginSavePolicy"


@dataclass(frozen=True)
class OpenHelp:
    kind: Literal["OpenHelp"] = "OpenHelp"


@dataclass(frozen=True)
class OpenLog:
    kind: Literal["OpenLog"] = "OpenLog"


@dataclass(frozen=True)
class CloseOverlay:
    kind: Literal["CloseOverlay"] = "CloseOverlay"


@dataclass(frozen=True)
class Quit:
    kind: Literal["Quit"] = "Quit"


# ---------------------------------------------------------------------------
# Dialog commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Confirm:
    kind: Literal["Confirm"] = "Confirm"


@dataclass(frozen=True)
class Cancel:
    kind: Literal["Cancel"] = "Cancel"


@dataclass(frozen=True)
class ToggleRestoreFirst:
    kind: Literal["ToggleRestoreFirst"] = "ToggleRestoreFirst"


# ---------------------------------------------------------------------------
# Mask editor commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MaskInput:
    """Append ``text`` to the focused text field (name or pattern)."""

    text: str
    kind: Literal["MaskInput"] = "MaskInput"


@dataclass(frozen=True)
class MaskBackspace:
    kind: Literal["MaskBackspace"] = "MaskBackspace"


@dataclass(frozen=True)
class MaskFieldNext:
    kind: Literal["MaskFieldNext"] = "MaskFieldNext"


@dataclass(frozen=True)
class MaskFieldPrevious:
    kind: Literal["MaskFieldPrevious"] = "MaskFieldPrevious"


@dataclass(frozen=True)
class CycleMaskKind:
    forward: bool = True
    kind: Literal["CycleMaskKind"] = "CycleMaskKind"


@dataclass(frozen=True)
class ToggleMaskCase:
    kind: Literal["ToggleMaskCase"] = "ToggleMaskCase"


# ---------------------------------------------------------------------------
# Backend feedback
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BucketsLoaded:
    buckets: tuple[BucketInfo, ...]
    kind: Literal["BucketsLoaded"] = "BucketsLoaded"


@dataclass(frozen=True)
class ObjectsLoaded:
    bucket: str
    objects: tuple[ObjectInfo, ...]
    kind: Literal["ObjectsLoaded"] = "ObjectsLoaded"


@dataclass(frozen=True)
class ObjectRefreshed:
    bucket: str
    info: ObjectInfo
    kind: Literal["ObjectRefreshed"] = "ObjectRefreshed"


@dataclass(frozen=True)
class PoliciesChanged:
    policies: tuple[MigrationPolicy, ...]
    kind: Literal["PoliciesChanged"] = "PoliciesChanged"


Command = (
    NextPane
    | PreviousPane
    | MoveSelection
    | JumpSelection
    | LoadSelectedBucket
    | RefreshBuckets
    | InspectObject
    | StartMaskEdit
    | ClearMask
    | BeginTransition
    | BeginRestore
    | BeginSavePolicy
    | OpenHelp
    | OpenLog
    | CloseOverlay
    | Quit
    | Confirm
    | Cancel
    | ToggleRestoreFirst
    | MaskInput
    | MaskBackspace
    | MaskFieldNext
    | MaskFieldPrevious
    | CycleMaskKind
    | ToggleMaskCase
)

Feedback = BucketsLoaded | ObjectsLoaded | ObjectRefreshed | PoliciesChanged

Event = Command | Feedback
