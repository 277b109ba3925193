"""S3 storage backend built on aioboto3.

Every public method returns ``Result[T, BackendError]``. Any exception raised
by a client call is caught here and classified by ``classify_exception``;
unrecognised ones become ``UnknownFailure``, so one bad key never aborts a
batch and nothing SDK-specific escapes into the console core.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from types import TracebackType

import aioboto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    HTTPClientError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)
from botocore.exceptions import ConnectionError as BotoConnectionError
from botocore.parsers import ResponseParserError

from tiershift.errors import (
    BackendError,
    DispatchFailure,
    ResponseMalformed,
    ServiceRejected,
    TimedOut,
    UnknownFailure,
    ValidationFailed,
)
from tiershift.exceptions import BackendStartupError
from tiershift.models import BucketInfo, ObjectInfo, StorageTier
from tiershift.restore import decode_restore_state
from tiershift.result import Failure, Result, Success
from tiershift.settings import ConsoleSettings

from .protocols import AsyncContextManagerProtocol, S3ClientProtocol


logger = logging.getLogger(__name__)

def classify_exception(exc: BaseException) -> BackendError:
    """Map a botocore/aioboto3 failure onto a BackendError category.

    Timeouts are checked before connection errors because botocore's
    ``ConnectTimeoutError`` and ``ReadTimeoutError`` subclass its connection
    and HTTP client errors.
    """
    match exc:
        case ClientError():
            error = exc.response.get("Error", {})
            return ServiceRejected(
                code=str(error.get("Code", "ServiceError")),
                message=str(error.get("Message", "")),
            )
        case ConnectTimeoutError() | ReadTimeoutError() | asyncio.TimeoutError():
            return TimedOut(message=str(exc))
        case (
            BotoConnectionError()
            | HTTPClientError()
            | NoCredentialsError()
            | PartialCredentialsError()
        ):
            return DispatchFailure(message=str(exc))
        case ResponseParserError():
            return ResponseMalformed(message=str(exc))
        case _:
            return UnknownFailure(raw=f"{type(exc).__name__}: {exc}")


def _as_datetime(value: object) -> datetime | None:
    return value if isinstance(value, datetime) else None


def _as_int(value: object) -> int:
    return value if isinstance(value, int) else 0


def _as_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


class S3Backend:
    """StorageBackend over the S3 API.

    Usage:
        ```python
        async with S3Backend(settings) as backend:
            match await backend.list_buckets():
                case Success(buckets):
                    ...
                case Failure(error):
                    print(describe_error(error))
        ```

    Tests can skip session setup with ``S3Backend.from_client(fake_client)``.
    """

    def __init__(self, settings: ConsoleSettings) -> None:
        self.settings = settings
        self.boto_config = Config(
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
            retries={"max_attempts": settings.max_attempts, "mode": "standard"},
        )
        self._client: S3ClientProtocol | None = None
        self._client_context: AsyncContextManagerProtocol | None = None

    @classmethod
    def from_client(cls, client: S3ClientProtocol, settings: ConsoleSettings) -> S3Backend:
        backend = cls(settings)
        backend._client = client
        return backend

    async def __aenter__(self) -> S3Backend:
        """Open the aioboto3 client.

        Raises:
            BackendStartupError: If the session or client cannot be created
                (unknown profile, invalid endpoint, missing region).
        """
        try:
            session = aioboto3.Session(
                profile_name=self.settings.profile,
                region_name=self.settings.region,
            )
            client_context = session.client(
                "s3",
                endpoint_url=self.settings.endpoint_url,
                config=self.boto_config,
            )
            self._client = await client_context.__aenter__()
        except (BotoCoreError, ValueError) as exc:
            raise BackendStartupError(str(exc)) from exc
        self._client_context = client_context
        logger.info(
            "S3 client ready (region=%s, endpoint=%s)",
            self.settings.region,
            self.settings.endpoint_url or "default",
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        client_ctx = self._client_context
        if client_ctx is not None:
            await client_ctx.__aexit__(exc_type, exc_val, exc_tb)
        self._client = None
        self._client_context = None
        return None

    @property
    def client(self) -> S3ClientProtocol:
        if self._client is None:
            raise RuntimeError("S3 client not initialized. Use 'async with' context manager.")
        return self._client

    # -------------------------------------------------------------------------
    # StorageBackend
    # -------------------------------------------------------------------------

    async def list_buckets(self) -> Result[list[BucketInfo], BackendError]:
        try:
            response = await self.client.list_buckets()
        except Exception as exc:
            return Failure(classify_exception(exc))

        raw_buckets = response.get("Buckets", []) if isinstance(response, dict) else []
        buckets: list[BucketInfo] = []
        for entry in raw_buckets:
            if not isinstance(entry, dict):
                continue
            name = _as_str(entry.get("Name"))
            if name is None:
                continue
            buckets.append(
                BucketInfo(
                    name=name,
                    region=await self._bucket_region(name),
                    creation_date=_as_datetime(entry.get("CreationDate")),
                )
            )
        buckets.sort(key=lambda bucket: bucket.name)
        return Success(buckets)

    async def _bucket_region(self, bucket: str) -> str | None:
        """Best-effort region lookup; unresolved regions are shown as such."""
        try:
            response = await self.client.get_bucket_location(Bucket=bucket)
        except Exception as exc:
            logger.debug("Region lookup failed for %s: %s", bucket, exc)
            return None
        constraint = response.get("LocationConstraint") if isinstance(response, dict) else None
        return _as_str(constraint) or None

    async def list_objects(
        self, bucket: str, prefix: str | None = None
    ) -> Result[list[ObjectInfo], BackendError]:
        params: dict[str, object] = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix

        objects: list[ObjectInfo] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            async for page in paginator.paginate(**params):
                if not isinstance(page, dict):
                    continue
                for entry in page.get("Contents", []):
                    key = _as_str(entry.get("Key")) if isinstance(entry, dict) else None
                    if key is None:
                        continue
                    objects.append(
                        ObjectInfo(
                            key=key,
                            size=_as_int(entry.get("Size")),
                            last_modified=_as_datetime(entry.get("LastModified")),
                            storage_tier=StorageTier.from_api(_as_str(entry.get("StorageClass"))),
                        )
                    )
        except Exception as exc:
            return Failure(classify_exception(exc))

        objects.sort(key=lambda obj: obj.key)
        return Success(objects)

    async def refresh_object(self, bucket: str, key: str) -> Result[ObjectInfo, BackendError]:
        try:
            head = await self.client.head_object(Bucket=bucket, Key=key)
        except Exception as exc:
            return Failure(classify_exception(exc))
        if not isinstance(head, dict):
            return Failure(ResponseMalformed(message=f"Unexpected HeadObject reply: {type(head)}"))
        return Success(
            ObjectInfo(
                key=key,
                size=_as_int(head.get("ContentLength")),
                last_modified=_as_datetime(head.get("LastModified")),
                storage_tier=StorageTier.from_api(_as_str(head.get("StorageClass"))),
                restore_state=decode_restore_state(_as_str(head.get("Restore"))),
            )
        )

    async def transition_storage_class(
        self, bucket: str, key: str, tier: StorageTier
    ) -> Result[None, BackendError]:
        """Rewrite the object onto itself with a new storage class."""
        if not tier.is_selectable:
            return Failure(
                ValidationFailed(message=f"{tier.label} is not supported as a migration target")
            )
        try:
            await self.client.copy_object(
                Bucket=bucket,
                Key=key,
                CopySource={"Bucket": bucket, "Key": key},
                StorageClass=tier.value,
                MetadataDirective="COPY",
            )
        except Exception as exc:
            return Failure(classify_exception(exc))
        return Success(None)

    async def request_restore(
        self, bucket: str, key: str, days: int
    ) -> Result[None, BackendError]:
        try:
            await self.client.restore_object(
                Bucket=bucket,
                Key=key,
                RestoreRequest={"Days": days},
            )
        except Exception as exc:
            return Failure(classify_exception(exc))
        return Success(None)
