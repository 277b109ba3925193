"""Saved migration policies: (bucket, mask, target tier) associations.

Policies are an append log, not a keyed map: saving the same combination twice
stores it twice. Records are immutable once written.

Persistence format is JSON Lines, one ``MigrationPolicy`` per line, so an
append never rewrites earlier records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from tiershift.exceptions import PolicyStoreError
from tiershift.mask import ObjectMask
from tiershift.models import StorageTier
from tiershift.result import Failure, Result, Success


logger = logging.getLogger(__name__)


class MigrationPolicy(BaseModel):
    """A saved rule: objects in ``bucket`` matching ``mask`` belong in ``target_tier``.

    Attributes
    ----------
    bucket
        Bucket the mask applies to.
    mask
        The mask that was active when the policy was saved.
    target_tier
        Destination storage class; must be a selectable migration target.
    scheduled
        Whether the policy is meant to run on a schedule.
    schedule
        Optional schedule expression accompanying ``scheduled``.
    """

    bucket: str = Field(..., min_length=1)
    mask: ObjectMask
    target_tier: StorageTier
    scheduled: bool = False
    schedule: str | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _validate(self) -> MigrationPolicy:
        if not self.target_tier.is_selectable:
            raise ValueError(f"{self.target_tier.label} is not a valid migration target")
        return self

    def describe(self) -> str:
        return f"{self.mask.name} -> {self.target_tier.label} ({self.bucket})"


@dataclass(frozen=True)
class PolicyWriteFailed:
    """A policy could not be persisted; the in-memory mirror is unchanged.

    Attributes:
        path: Policy file location.
        message: Underlying I/O error text.
    """

    path: str
    message: str
    kind: Literal["PolicyWriteFailed"] = "PolicyWriteFailed"


class PolicyPersistence(Protocol):
    """Durable append-only storage for policies."""

    def load_all(self) -> list[MigrationPolicy]: ...

    def append(self, policy: MigrationPolicy) -> Result[None, PolicyWriteFailed]: ...


class PolicyFile:
    """JSON Lines policy file.

    A missing file is an empty collection. The parent directory is created on
    the first append.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load_all(self) -> list[MigrationPolicy]:
        """Read every stored policy.

        Raises:
            PolicyStoreError: If the file cannot be read or any line is invalid.
        """
        if not self.path.exists():
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PolicyStoreError(self.path, str(exc)) from exc

        policies: list[MigrationPolicy] = []
        for line_no, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                policies.append(MigrationPolicy.model_validate_json(line))
            except ValidationError as exc:
                raise PolicyStoreError(self.path, f"line {line_no}: {exc}") from exc
        return policies

    def append(self, policy: MigrationPolicy) -> Result[None, PolicyWriteFailed]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(policy.model_dump_json() + "\n")
        except OSError as exc:
            return Failure(PolicyWriteFailed(path=str(self.path), message=str(exc)))
        return Success(None)


class PolicyStore:
    """In-memory mirror of the persisted policies.

    Usage:
        ```python
        store = PolicyStore.open(PolicyFile(Path("policies.jsonl")))
        match store.add(policy):
            case Success(policies):
                render(policies)
            case Failure(PolicyWriteFailed(path=path, message=msg)):
                report(f"Could not write {path}: {msg}")
        ```
    """

    def __init__(self, persistence: PolicyPersistence, policies: list[MigrationPolicy]) -> None:
        self._persistence = persistence
        self._policies = list(policies)

    @classmethod
    def open(cls, persistence: PolicyPersistence) -> PolicyStore:
        """Load the mirror from ``persistence``.

        Raises:
            PolicyStoreError: Propagated from the persistence layer; fatal at startup.
        """
        policies = persistence.load_all()
        logger.info("Loaded %d saved policies", len(policies))
        return cls(persistence, policies)

    @property
    def policies(self) -> tuple[MigrationPolicy, ...]:
        return tuple(self._policies)

    def add(self, policy: MigrationPolicy) -> Result[tuple[MigrationPolicy, ...], PolicyWriteFailed]:
        """Persist ``policy``, then append it to the mirror."""
        match self._persistence.append(policy):
            case Failure(error):
                logger.warning("Policy write failed: %s", error.message)
                return Failure(error)
            case Success(_):
                self._policies.append(policy)
                return Success(self.policies)
