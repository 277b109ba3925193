"""Domain records for buckets, objects, storage tiers and restore states."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal


class StorageTier(str, Enum):
    """S3 storage classes, keyed by their wire value."""

    STANDARD = "STANDARD"
    STANDARD_IA = "STANDARD_IA"
    ONEZONE_IA = "ONEZONE_IA"
    INTELLIGENT_TIERING = "INTELLIGENT_TIERING"
    GLACIER_IR = "GLACIER_IR"
    GLACIER = "GLACIER"
    DEEP_ARCHIVE = "DEEP_ARCHIVE"
    REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"
    OUTPOSTS = "OUTPOSTS"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_api(cls, raw: str | None) -> StorageTier:
        """Decode the ``StorageClass`` field of a listing or HEAD response.

        HeadObject omits the field for STANDARD objects, so absence means
        STANDARD rather than UNKNOWN.
        """
        if raw is None or raw == "":
            return cls.STANDARD
        try:
            return cls(raw.upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_selectable(self) -> bool:
        """Whether the tier may be requested as a migration target."""
        return self in SELECTABLE_TIERS


_LABELS: dict[StorageTier, str] = {
    StorageTier.STANDARD: "Standard",
    StorageTier.STANDARD_IA: "Standard-IA",
    StorageTier.ONEZONE_IA: "One Zone-IA",
    StorageTier.INTELLIGENT_TIERING: "Intelligent-Tiering",
    StorageTier.GLACIER_IR: "Glacier Instant Retrieval",
    StorageTier.GLACIER: "Glacier Flexible Retrieval",
    StorageTier.DEEP_ARCHIVE: "Glacier Deep Archive",
    StorageTier.REDUCED_REDUNDANCY: "Reduced Redundancy",
    StorageTier.OUTPOSTS: "Outposts",
    StorageTier.UNKNOWN: "Unknown",
}

# Order is the order offered in the tier picker.
SELECTABLE_TIERS: tuple[StorageTier, ...] = (
    StorageTier.STANDARD,
    StorageTier.STANDARD_IA,
    StorageTier.ONEZONE_IA,
    StorageTier.INTELLIGENT_TIERING,
    StorageTier.GLACIER_IR,
    StorageTier.GLACIER,
    StorageTier.DEEP_ARCHIVE,
)


# ---------------------------------------------------------------------------
# RestoreState ADT
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RestoreAvailable:
    """A restored copy is available (or the restore finished)."""

    kind: Literal["RestoreAvailable"] = "RestoreAvailable"


@dataclass(frozen=True)
class RestoreExpired:
    """The object carries a restore marker but no live restored copy."""

    kind: Literal["RestoreExpired"] = "RestoreExpired"


@dataclass(frozen=True)
class RestoreInProgress:
    """A restore request is outstanding, or the copy is live until ``expiry``.

    Attributes:
        expiry: UTC time the restored copy expires, when the backend reports one.
    """

    expiry: datetime | None = None
    kind: Literal["RestoreInProgress"] = "RestoreInProgress"


RestoreState = RestoreAvailable | RestoreExpired | RestoreInProgress


# ---------------------------------------------------------------------------
# Listing records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BucketInfo:
    """A bucket visible to the configured credentials."""

    name: str
    region: str | None = None
    creation_date: datetime | None = None


@dataclass(frozen=True)
class ObjectInfo:
    """One object of the currently loaded bucket.

    Attributes:
        key: Object key, unique within the bucket listing.
        size: Size in bytes (0 is valid).
        last_modified: Last-modified timestamp when the backend reports one.
        storage_tier: Current storage class.
        restore_state: Restore lifecycle; ``None`` when not applicable or not yet
            fetched (listings never carry it, only a single-object refresh does).
    """

    key: str
    size: int = 0
    last_modified: datetime | None = None
    storage_tier: StorageTier = StorageTier.STANDARD
    restore_state: RestoreState | None = None


def format_size(size: int) -> str:
    """Human-readable byte count using binary units."""
    kb = 1024.0
    mb = kb * 1024.0
    gb = mb * 1024.0
    if size > gb:
        return f"{size / gb:.2f} GB"
    if size > mb:
        return f"{size / mb:.2f} MB"
    if size > kb:
        return f"{size / kb:.2f} KB"
    return f"{size} B"
