# tests/helpers/__init__.py
"""Shared test utilities for the tiershift test suite.

Usage:
    >>> from tests.helpers import expect_success, make_mask, browsing_state
    >>>
    >>> mask = make_mask("logs/")
    >>> state = browsing_state("logs/a", "logs/b", "img/c", mask=mask)
"""

from __future__ import annotations

from tests.helpers.factories import (
    DEFAULT_BUCKET,
    FakePaginator,
    FakeS3Client,
    MemoryPolicyPersistence,
    browsing_state,
    make_mask,
    make_objects,
    make_selection,
)
from tests.helpers.result_utils import expect_failure, expect_success


__all__ = [
    # Result unwrapping
    "expect_success",
    "expect_failure",
    # Factories
    "DEFAULT_BUCKET",
    "make_objects",
    "make_mask",
    "make_selection",
    "browsing_state",
    # Fakes
    "MemoryPolicyPersistence",
    "FakePaginator",
    "FakeS3Client",
]
