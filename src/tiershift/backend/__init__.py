# src/tiershift/backend/__init__.py
"""
Storage backends for the tiershift console.

``StorageBackend`` is the contract consumed by the orchestrator. ``S3Backend``
implements it over aioboto3; ``InMemoryBackend`` implements it over
dictionaries for tests and offline use.
"""

from __future__ import annotations

from .memory import InMemoryBackend
from .protocols import PaginatorProtocol, S3ClientProtocol, StorageBackend
from .s3 import S3Backend, classify_exception


__all__ = [
    # Contract
    "StorageBackend",
    "S3ClientProtocol",
    "PaginatorProtocol",
    # Implementations
    "S3Backend",
    "InMemoryBackend",
    # Error classification
    "classify_exception",
]
