"""
In-memory storage backend for tests and offline demos.

``InMemoryBackend`` keeps buckets and objects in dictionaries, records every
call it receives, and returns scripted failures for chosen operations.

Example:
    >>> backend = InMemoryBackend({"logs": [ObjectInfo(key="a.log")]})
    >>> backend.fail("request_restore", "a.log", ServiceRejected("InvalidObjectState", "busy"))
    >>>
    >>> await orchestrator.interpret(ExecuteAction(RestoreAction()), state)
    >>>
    >>> assert backend.calls == [("request_restore", "logs", "a.log")]
"""

from __future__ import annotations

from dataclasses import replace
from typing import Literal, Mapping, Sequence

from tiershift.errors import BackendError, ServiceRejected, ValidationFailed
from tiershift.models import BucketInfo, ObjectInfo, RestoreInProgress, StorageTier
from tiershift.result import Failure, Result, Success


Operation = Literal[
    "list_buckets",
    "list_objects",
    "refresh_object",
    "transition_storage_class",
    "request_restore",
]


class InMemoryBackend:
    """StorageBackend over plain dictionaries.

    Attributes:
        calls: Every call received, as ``(operation, bucket, key)`` tuples
            (``key`` is empty for bucket-level calls).
        failures: Scripted failures keyed by ``(operation, key-or-bucket)``.
    """

    def __init__(
        self,
        buckets: Mapping[str, Sequence[ObjectInfo]] | None = None,
        region: str | None = "us-east-1",
    ) -> None:
        self.region = region
        self._objects: dict[str, dict[str, ObjectInfo]] = {
            name: {obj.key: obj for obj in objects} for name, objects in (buckets or {}).items()
        }
        self.calls: list[tuple[Operation, str, str]] = []
        self.failures: dict[tuple[Operation, str], BackendError] = {}

    def fail(self, operation: Operation, target: str, error: BackendError) -> None:
        """Make ``operation`` on ``target`` (a key, or a bucket for listings) fail."""
        self.failures[(operation, target)] = error

    def object(self, bucket: str, key: str) -> ObjectInfo:
        return self._objects[bucket][key]

    def _scripted(self, operation: Operation, target: str) -> BackendError | None:
        return self.failures.get((operation, target))

    def _missing(self, bucket: str, key: str) -> ServiceRejected | None:
        if bucket not in self._objects:
            return ServiceRejected(code="NoSuchBucket", message=f"{bucket} does not exist")
        if key not in self._objects[bucket]:
            return ServiceRejected(code="NoSuchKey", message=f"{key} does not exist")
        return None

    # -------------------------------------------------------------------------
    # StorageBackend
    # -------------------------------------------------------------------------

    async def list_buckets(self) -> Result[list[BucketInfo], BackendError]:
        self.calls.append(("list_buckets", "", ""))
        error = self._scripted("list_buckets", "")
        if error is not None:
            return Failure(error)
        return Success([BucketInfo(name=name, region=self.region) for name in sorted(self._objects)])

    async def list_objects(
        self, bucket: str, prefix: str | None = None
    ) -> Result[list[ObjectInfo], BackendError]:
        self.calls.append(("list_objects", bucket, ""))
        error = self._scripted("list_objects", bucket)
        if error is not None:
            return Failure(error)
        if bucket not in self._objects:
            return Failure(ServiceRejected(code="NoSuchBucket", message=f"{bucket} does not exist"))
        objects = [
            obj
            for key, obj in sorted(self._objects[bucket].items())
            if prefix is None or key.startswith(prefix)
        ]
        return Success(objects)

    async def refresh_object(self, bucket: str, key: str) -> Result[ObjectInfo, BackendError]:
        self.calls.append(("refresh_object", bucket, key))
        error = self._scripted("refresh_object", key) or self._missing(bucket, key)
        if error is not None:
            return Failure(error)
        return Success(self._objects[bucket][key])

    async def transition_storage_class(
        self, bucket: str, key: str, tier: StorageTier
    ) -> Result[None, BackendError]:
        self.calls.append(("transition_storage_class", bucket, key))
        if not tier.is_selectable:
            return Failure(
                ValidationFailed(message=f"{tier.label} is not supported as a migration target")
            )
        error = self._scripted("transition_storage_class", key) or self._missing(bucket, key)
        if error is not None:
            return Failure(error)
        current = self._objects[bucket][key]
        self._objects[bucket][key] = replace(current, storage_tier=tier)
        return Success(None)

    async def request_restore(
        self, bucket: str, key: str, days: int
    ) -> Result[None, BackendError]:
        self.calls.append(("request_restore", bucket, key))
        error = self._scripted("request_restore", key) or self._missing(bucket, key)
        if error is not None:
            return Failure(error)
        current = self._objects[bucket][key]
        self._objects[bucket][key] = replace(current, restore_state=RestoreInProgress(expiry=None))
        return Success(None)
