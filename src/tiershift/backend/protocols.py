"""
Protocol definitions for the storage backend and the async S3 client.

``StorageBackend`` is the contract the orchestrator consumes; every method
returns a ``Result`` whose error side is already classified into
``BackendError``. ``S3ClientProtocol`` describes the subset of the aioboto3 S3
client that ``S3Backend`` calls, so tests can substitute a plain fake.
"""

from __future__ import annotations

from types import TracebackType
from typing import AsyncIterator, Protocol

from botocore.config import Config

from tiershift.errors import BackendError
from tiershift.models import BucketInfo, ObjectInfo, StorageTier
from tiershift.result import Result


# ---------------------------------------------------------------------------
# Storage backend contract
# ---------------------------------------------------------------------------


class StorageBackend(Protocol):
    """Operations the console needs from an object store."""

    async def list_buckets(self) -> Result[list[BucketInfo], BackendError]:
        """All buckets, sorted by name."""
        ...

    async def list_objects(
        self, bucket: str, prefix: str | None = None
    ) -> Result[list[ObjectInfo], BackendError]:
        """Every object in ``bucket`` (pagination already resolved), sorted by key."""
        ...

    async def refresh_object(self, bucket: str, key: str) -> Result[ObjectInfo, BackendError]:
        """Fresh metadata for one object, including its restore state."""
        ...

    async def transition_storage_class(
        self, bucket: str, key: str, tier: StorageTier
    ) -> Result[None, BackendError]:
        """Move one object to ``tier``; fails for non-selectable tiers."""
        ...

    async def request_restore(
        self, bucket: str, key: str, days: int
    ) -> Result[None, BackendError]:
        """Ask for a temporary restored copy of an archived object."""
        ...


# ---------------------------------------------------------------------------
# aioboto3 client surface
# ---------------------------------------------------------------------------


class PaginatorProtocol(Protocol):
    """Protocol for S3 paginator returned by get_paginator()."""

    def paginate(self, **kwargs: object) -> AsyncIterator[object]: ...


class S3ClientProtocol(Protocol):
    """The async S3 client calls made by ``S3Backend``."""

    async def list_buckets(self, **kwargs: object) -> object: ...
    async def get_bucket_location(self, **kwargs: object) -> object: ...
    async def head_object(self, **kwargs: object) -> object: ...
    async def copy_object(self, **kwargs: object) -> object: ...
    async def restore_object(self, **kwargs: object) -> object: ...
    def get_paginator(self, operation_name: str) -> PaginatorProtocol: ...


class AsyncContextManagerProtocol(Protocol):
    """Protocol for async context manager returned by session.client()."""

    async def __aenter__(self) -> S3ClientProtocol: ...
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None: ...


class SessionProtocol(Protocol):
    """Protocol for aioboto3.Session."""

    def client(
        self,
        service_name: str,
        endpoint_url: str | None = ...,
        config: Config | None = ...,
        **kwargs: object,
    ) -> AsyncContextManagerProtocol: ...


__all__ = [
    "StorageBackend",
    "PaginatorProtocol",
    "S3ClientProtocol",
    "AsyncContextManagerProtocol",
    "SessionProtocol",
]
