"""Bounded status feed shown at the bottom of the console and in the log view."""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterator, Literal


logger = logging.getLogger(__name__)

DEFAULT_STATUS_CAPACITY = 20

StatusLevel = Literal["info", "warning"]


class StatusLog:
    """FIFO ring buffer of status lines; the oldest line is evicted first once full.

    Every line is mirrored to the module logger so a log file keeps the full
    history the ring buffer drops.
    """

    def __init__(self, capacity: int = DEFAULT_STATUS_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"Status capacity must be positive, got {capacity}")
        self._entries: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        maxlen = self._entries.maxlen
        assert maxlen is not None
        return maxlen

    def push(self, message: str, level: StatusLevel = "info") -> None:
        self._entries.append(message)
        logger.log(logging.WARNING if level == "warning" else logging.INFO, message)

    def entries(self) -> list[str]:
        """Oldest first."""
        return list(self._entries)

    def latest(self, count: int) -> list[str]:
        """The ``count`` most recent lines, newest first."""
        return list(reversed(self._entries))[:count]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
