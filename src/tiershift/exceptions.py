"""Exceptions for failures that abort startup.

Everything that can go wrong once the console is running is reported through
``Result`` values and status lines. The exceptions below are reserved for
conditions under which the console must not start at all.
"""

from __future__ import annotations

from pathlib import Path


class TiershiftError(Exception):
    """Base exception for fatal tiershift errors."""

    pass


class PolicyStoreError(TiershiftError):
    """The saved policy file could not be read or parsed.

    Starting with a partial policy set would silently hide saved configuration,
    so this is always fatal.
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Cannot load policies from {path}: {message}")


class BackendStartupError(TiershiftError):
    """The storage backend client could not be constructed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Storage backend unavailable: {message}")


__all__ = [
    "TiershiftError",
    "PolicyStoreError",
    "BackendStartupError",
]
