"""
Effect ADTs - side effects requested by the state machine.

The state machine never talks to the backend, the policy file or the status
feed. It returns these immutable descriptions, and the orchestrator is the only
place that executes them.

Type Safety:
    - All effect types are frozen dataclasses (immutable)
    - Literal discriminators enable exhaustive pattern matching
    - ``Effect`` is the closed union of every variant
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tiershift.actions import PendingAction
from tiershift.status import StatusLevel


@dataclass(frozen=True)
class PushStatus:
    """Append a line to the status feed.

    Attributes:
        message: Text of the status line.
        level: "warning" for validation and failure messages.
    """

    message: str
    level: StatusLevel = "info"
    kind: Literal["PushStatus"] = "PushStatus"


@dataclass(frozen=True)
class LoadBuckets:
    """Fetch the bucket list."""

    kind: Literal["LoadBuckets"] = "LoadBuckets"


@dataclass(frozen=True)
class LoadObjects:
    """Fetch the full object listing of ``bucket``."""

    bucket: str
    kind: Literal["LoadObjects"] = "LoadObjects"


@dataclass(frozen=True)
class RefreshObject:
    """Re-fetch metadata (including restore status) for a single object."""

    bucket: str
    key: str
    kind: Literal["RefreshObject"] = "RefreshObject"


@dataclass(frozen=True)
class ExecuteAction:
    """Run a confirmed pending action against the current selection."""

    action: PendingAction
    kind: Literal["ExecuteAction"] = "ExecuteAction"


@dataclass(frozen=True)
class ExitConsole:
    """Stop the interactive loop."""

    kind: Literal["ExitConsole"] = "ExitConsole"


BackendEffect = LoadBuckets | LoadObjects | RefreshObject | ExecuteAction
"""Effects executed by the migration orchestrator."""

Effect = PushStatus | BackendEffect | ExitConsole
