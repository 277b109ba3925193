# tests/test_selection.py
"""Tests for the selection model: ordering, filtering, targeting, movement."""

from __future__ import annotations

from tiershift.mask import MaskKind
from tiershift.models import BucketInfo, ObjectInfo, StorageTier
from tiershift.selection import SelectionModel

from tests.helpers import make_mask, make_objects, make_selection


class TestContents:
    def test_buckets_sorted_by_name(self) -> None:
        selection = SelectionModel().set_buckets(
            [BucketInfo(name="b"), BucketInfo(name="a"), BucketInfo(name="c")]
        )
        assert [bucket.name for bucket in selection.buckets] == ["a", "b", "c"]

    def test_objects_sorted_by_key_and_bucket_recorded(self) -> None:
        selection = SelectionModel().set_objects(make_objects("z", "a", "m"), bucket="data")
        assert [obj.key for obj in selection.objects] == ["a", "m", "z"]
        assert selection.loaded_bucket == "data"

    def test_set_objects_resets_filter_and_highlight(self) -> None:
        selection = make_selection("logs/a", "logs/b", mask=make_mask("logs/")).move_object(1)
        reloaded = selection.set_objects(make_objects("x"), bucket="other")
        assert reloaded.filtered == ()
        assert reloaded.selected_object == 0


class TestMask:
    def test_apply_then_clear_restores_original_list(self) -> None:
        selection = make_selection("b.txt", "a.log", "c.log")
        original = selection.active_objects()

        masked = selection.apply_mask(make_mask(".log", MaskKind.SUFFIX))
        assert [obj.key for obj in masked.active_objects()] == ["a.log", "c.log"]

        cleared = masked.apply_mask(None)
        assert cleared.active_objects() == original
        assert cleared.active_mask is None

    def test_match_count(self) -> None:
        selection = make_selection("logs/a", "logs/b", "img/c", mask=make_mask("logs/"))
        assert selection.match_count == 2

    def test_mask_matching_nothing(self) -> None:
        selection = make_selection("logs/a", mask=make_mask("nothing/"))
        assert selection.match_count == 0
        assert selection.active_objects() == ()
        assert selection.target_keys() == []

    def test_replace_object_keeps_filter_consistent(self) -> None:
        selection = make_selection("logs/a", "logs/b", mask=make_mask("logs/"))
        refreshed = ObjectInfo(key="logs/b", size=9, storage_tier=StorageTier.GLACIER)

        updated = selection.replace_object(refreshed)

        assert updated.filtered[1] == refreshed
        assert updated.objects[1] == refreshed
        assert updated.match_count == 2


class TestTargeting:
    def test_mask_targets_every_match(self) -> None:
        selection = make_selection("logs/a", "logs/b", "img/c", mask=make_mask("logs/"))
        assert selection.target_keys() == ["logs/a", "logs/b"]

    def test_without_mask_targets_highlighted_row(self) -> None:
        selection = make_selection("a", "b", "c").move_object(2)
        assert selection.target_keys() == ["c"]

    def test_empty_bucket_targets_nothing(self) -> None:
        assert make_selection().target_keys() == []

    def test_selected_bucket_name(self) -> None:
        selection = make_selection(buckets=("alpha", "beta")).move_bucket(1)
        assert selection.selected_bucket_name() == "beta"
        assert SelectionModel().selected_bucket_name() is None


class TestMovement:
    def test_move_is_clamped(self) -> None:
        selection = make_selection("a", "b", "c")
        assert selection.move_object(10).selected_object == 2
        assert selection.move_object(-10).selected_object == 0

    def test_move_on_empty_list_is_noop(self) -> None:
        selection = SelectionModel()
        assert selection.move_object(1) == selection
        assert selection.move_bucket(-1) == selection
        assert selection.jump_object(False) == selection

    def test_jump(self) -> None:
        selection = make_selection("a", "b", "c", buckets=("x", "y"))
        assert selection.jump_object(False).selected_object == 2
        assert selection.jump_object(False).jump_object(True).selected_object == 0
        assert selection.jump_bucket(False).selected_bucket == 1

    def test_movement_follows_filtered_list(self) -> None:
        selection = make_selection("logs/a", "logs/b", "z", mask=make_mask("logs/"))
        moved = selection.move_object(5)
        assert moved.selected_object == 1
        info = moved.selected_object_info()
        assert info is not None and info.key == "logs/b"
