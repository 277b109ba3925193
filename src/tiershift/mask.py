"""Object masks: named, reusable predicates over object keys.

A mask pairs a pattern with a match kind. Prefix, suffix and substring masks
compare case-folded text unless the mask is case-sensitive; regex masks use
``re.search`` semantics (the pattern may match anywhere in the key) and
``re.IGNORECASE`` for case-insensitive matching.

Masks are Pydantic models so that saved policies round-trip them losslessly.
Construction validates the pattern, so a mask loaded from disk is as
trustworthy as one compiled in the editor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

from tiershift.result import Failure, Result, Success
from tiershift.validation import validate_model, validation_message


class MaskKind(str, Enum):
    PREFIX = "prefix"
    SUFFIX = "suffix"
    CONTAINS = "contains"
    REGEX = "regex"

    def next(self) -> MaskKind:
        order = list(MaskKind)
        return order[(order.index(self) + 1) % len(order)]

    def previous(self) -> MaskKind:
        order = list(MaskKind)
        return order[(order.index(self) - 1) % len(order)]


@dataclass(frozen=True)
class MaskCompileError:
    """The mask could not be activated.

    Attributes:
        pattern: Pattern as entered.
        message: Why it was rejected (empty pattern, bad regex).
    """

    pattern: str
    message: str
    kind: Literal["MaskCompileError"] = "MaskCompileError"


@lru_cache(maxsize=128)
def _compiled(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    return re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)


class ObjectMask(BaseModel):
    """A validated key filter.

    Attributes
    ----------
    name
        Display name, shown in status lines and saved policies.
    pattern
        Non-empty pattern text.
    kind
        How ``pattern`` is matched against keys.
    case_sensitive
        When false, matching ignores case.
    """

    name: str
    pattern: str
    kind: MaskKind = MaskKind.PREFIX
    case_sensitive: bool = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _validate(self) -> ObjectMask:
        """Reject empty patterns and regexes that do not compile."""
        if not self.pattern:
            raise ValueError("Mask pattern cannot be empty")
        if self.kind is MaskKind.REGEX:
            try:
                _compiled(self.pattern, self.case_sensitive)
            except re.error as exc:
                raise ValueError(f"Invalid regex '{self.pattern}': {exc}") from exc
        return self

    def matches(self, key: str) -> bool:
        if self.kind is MaskKind.REGEX:
            return _compiled(self.pattern, self.case_sensitive).search(key) is not None

        subject, pattern = (
            (key, self.pattern)
            if self.case_sensitive
            else (key.casefold(), self.pattern.casefold())
        )
        match self.kind:
            case MaskKind.PREFIX:
                return subject.startswith(pattern)
            case MaskKind.SUFFIX:
                return subject.endswith(pattern)
            case MaskKind.CONTAINS:
                return pattern in subject
        raise AssertionError(f"Unhandled mask kind: {self.kind!r}")

    def summary(self) -> str:
        """One-line description used in titles and status messages."""
        case = ", case-sensitive" if self.case_sensitive else ""
        return f"{self.name} ({self.kind.value}: {self.pattern}{case})"


def compile_mask(
    name: str, pattern: str, kind: MaskKind, case_sensitive: bool
) -> Result[ObjectMask, MaskCompileError]:
    """Build an active mask, or explain why the pattern cannot become one."""
    match validate_model(
        ObjectMask, name=name, pattern=pattern, kind=kind, case_sensitive=case_sensitive
    ):
        case Success(mask):
            return Success(mask)
        case Failure(exc):
            return Failure(MaskCompileError(pattern=pattern, message=validation_message(exc)))
