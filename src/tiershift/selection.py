"""Selection model: which bucket and which objects an operation targets.

The model is an immutable value. Every operation returns a new model, which
keeps the state machine's transition function pure.

Targeting rule:
    - With an active mask, the targets are every object in the filtered list.
    - Without one, the target is the single highlighted object, or nothing when
      the highlight is out of range (e.g. an empty bucket).
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from tiershift.mask import ObjectMask
from tiershift.models import BucketInfo, ObjectInfo


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length - 1))


@dataclass(frozen=True)
class SelectionModel:
    """Bucket list, object lists and highlight positions.

    Attributes:
        buckets: Buckets sorted by name.
        objects: Unfiltered objects of the loaded bucket, sorted by key.
        filtered: Objects matching ``active_mask`` (empty without a mask).
        selected_bucket: Highlighted bucket index.
        selected_object: Highlighted index into ``active_objects()``.
        active_mask: Mask currently filtering the object list.
        loaded_bucket: Bucket whose objects are loaded, if any.
    """

    buckets: tuple[BucketInfo, ...] = ()
    objects: tuple[ObjectInfo, ...] = ()
    filtered: tuple[ObjectInfo, ...] = ()
    selected_bucket: int = 0
    selected_object: int = 0
    active_mask: ObjectMask | None = None
    loaded_bucket: str | None = None

    # ------------------------------------------------------------------ #
    # Replacing contents                                                 #
    # ------------------------------------------------------------------ #

    def set_buckets(self, buckets: tuple[BucketInfo, ...] | list[BucketInfo]) -> SelectionModel:
        return replace(
            self,
            buckets=tuple(sorted(buckets, key=lambda bucket: bucket.name)),
            selected_bucket=0,
        )

    def set_objects(
        self, objects: tuple[ObjectInfo, ...] | list[ObjectInfo], bucket: str | None = None
    ) -> SelectionModel:
        return replace(
            self,
            objects=tuple(sorted(objects, key=lambda obj: obj.key)),
            filtered=(),
            selected_object=0,
            loaded_bucket=bucket,
        )

    def apply_mask(self, mask: ObjectMask | None) -> SelectionModel:
        """Filter the object list by ``mask``, or clear the filter with ``None``."""
        if mask is None:
            return replace(self, active_mask=None, filtered=(), selected_object=0)
        return replace(
            self,
            active_mask=mask,
            filtered=tuple(obj for obj in self.objects if mask.matches(obj.key)),
            selected_object=0,
        )

    def replace_object(self, refreshed: ObjectInfo) -> SelectionModel:
        """Swap in fresh metadata for one key, keeping the highlight where it is."""
        objects = tuple(refreshed if obj.key == refreshed.key else obj for obj in self.objects)
        mask = self.active_mask
        filtered = (
            tuple(obj for obj in objects if mask.matches(obj.key)) if mask is not None else ()
        )
        return replace(self, objects=objects, filtered=filtered)

    # ------------------------------------------------------------------ #
    # Queries                                                            #
    # ------------------------------------------------------------------ #

    @property
    def match_count(self) -> int:
        return len(self.filtered)

    def active_objects(self) -> tuple[ObjectInfo, ...]:
        return self.filtered if self.active_mask is not None else self.objects

    def selected_bucket_name(self) -> str | None:
        if 0 <= self.selected_bucket < len(self.buckets):
            return self.buckets[self.selected_bucket].name
        return None

    def selected_object_info(self) -> ObjectInfo | None:
        active = self.active_objects()
        if 0 <= self.selected_object < len(active):
            return active[self.selected_object]
        return None

    def target_keys(self) -> list[str]:
        if self.active_mask is not None:
            return [obj.key for obj in self.filtered]
        if 0 <= self.selected_object < len(self.objects):
            return [self.objects[self.selected_object].key]
        return []

    # ------------------------------------------------------------------ #
    # Movement (clamped; no-op on empty lists)                           #
    # ------------------------------------------------------------------ #

    def move_bucket(self, delta: int) -> SelectionModel:
        if not self.buckets:
            return self
        return replace(
            self, selected_bucket=_clamp(self.selected_bucket + delta, len(self.buckets))
        )

    def move_object(self, delta: int) -> SelectionModel:
        active = self.active_objects()
        if not active:
            return self
        return replace(self, selected_object=_clamp(self.selected_object + delta, len(active)))

    def jump_bucket(self, to_start: bool) -> SelectionModel:
        if not self.buckets:
            return self
        return replace(self, selected_bucket=0 if to_start else len(self.buckets) - 1)

    def jump_object(self, to_start: bool) -> SelectionModel:
        active = self.active_objects()
        if not active:
            return self
        return replace(self, selected_object=0 if to_start else len(active) - 1)
