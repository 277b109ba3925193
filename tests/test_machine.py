# tests/test_machine.py
"""Tests for the interaction state machine.

``step`` is pure, so every test builds a state, feeds one or more events and
inspects the resulting state and effects. No backend is involved.
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from tiershift.actions import RestoreAction, SavePolicyAction, TransitionAction
from tiershift.effects import (
    Effect,
    ExecuteAction,
    ExitConsole,
    LoadBuckets,
    LoadObjects,
    PushStatus,
    RefreshObject,
)
from tiershift.events import (
    BeginRestore,
    BeginSavePolicy,
    BeginTransition,
    BucketsLoaded,
    Cancel,
    ClearMask,
    CloseOverlay,
    Confirm,
    CycleMaskKind,
    Event,
    InspectObject,
    JumpSelection,
    LoadSelectedBucket,
    MaskBackspace,
    MaskFieldNext,
    MaskInput,
    MoveSelection,
    NextPane,
    ObjectRefreshed,
    ObjectsLoaded,
    OpenHelp,
    OpenLog,
    PreviousPane,
    Quit,
    RefreshBuckets,
    StartMaskEdit,
    ToggleMaskCase,
    ToggleRestoreFirst,
)
from tiershift.machine import (
    ConsoleState,
    MaskDraft,
    MaskField,
    Mode,
    Pane,
    StorageIntent,
    Transition,
    initial_state,
    step,
)
from tiershift.mask import MaskKind
from tiershift.models import SELECTABLE_TIERS, BucketInfo, ObjectInfo, StorageTier

from tests.helpers import DEFAULT_BUCKET, browsing_state, make_mask, make_objects


def run(state: ConsoleState, *events: Event) -> tuple[ConsoleState, list[Effect]]:
    """Step through ``events``, collecting every effect."""
    effects: list[Effect] = []
    for event in events:
        transition = step(state, event)
        state = transition.state
        effects.extend(transition.effects)
    return state, effects


def messages(effects: list[Effect]) -> list[str]:
    return [effect.message for effect in effects if isinstance(effect, PushStatus)]


def warnings(effects: list[Effect]) -> list[str]:
    return [
        effect.message
        for effect in effects
        if isinstance(effect, PushStatus) and effect.level == "warning"
    ]


def type_text(text: str) -> list[Event]:
    return [MaskInput(character) for character in text]


class TestBackendFeedback:
    """Feedback events are applied in every mode."""

    def test_buckets_loaded_are_sorted(self) -> None:
        buckets = (BucketInfo(name="b"), BucketInfo(name="a"), BucketInfo(name="c"))
        state, effects = run(initial_state(), BucketsLoaded(buckets))
        assert [bucket.name for bucket in state.selection.buckets] == ["a", "b", "c"]
        assert messages(effects) == ["Loaded 3 buckets"]

    def test_objects_loaded_reapplies_active_mask(self) -> None:
        state = browsing_state("logs/a", mask=make_mask("logs/", name="logs"))
        objects = make_objects("logs/a", "logs/b", "img/c")

        state, effects = run(state, ObjectsLoaded(DEFAULT_BUCKET, objects))

        assert state.selection.match_count == 2
        assert messages(effects) == [
            "Mask 'logs' matched 2 objects",
            f"Loaded 3 objects for bucket {DEFAULT_BUCKET}",
        ]

    def test_feedback_applies_while_dialog_open(self) -> None:
        state = replace(browsing_state("a"), mode=Mode.SHOWING_HELP)
        state, _ = run(state, BucketsLoaded((BucketInfo(name="z"),)))
        assert state.mode is Mode.SHOWING_HELP
        assert state.selection.buckets[0].name == "z"

    def test_object_refreshed_replaces_metadata(self) -> None:
        state = browsing_state("a", "b")
        info = ObjectInfo(key="b", size=7, storage_tier=StorageTier.DEEP_ARCHIVE)

        state, effects = run(state, ObjectRefreshed(DEFAULT_BUCKET, info))

        assert state.selection.objects[1] == info
        assert messages(effects) == ["Object metadata refreshed for b"]

    def test_object_refreshed_for_other_bucket_is_ignored(self) -> None:
        state = browsing_state("a")
        new_state, effects = run(state, ObjectRefreshed("elsewhere", ObjectInfo(key="a", size=1)))
        assert new_state == state
        assert effects == []


class TestBrowsing:
    def test_pane_cycle(self) -> None:
        state = initial_state()
        order = []
        for _ in range(4):
            state, _ = run(state, NextPane())
            order.append(state.pane)
        assert order == [Pane.OBJECTS, Pane.MASK_EDITOR, Pane.POLICIES, Pane.BUCKETS]
        state, _ = run(state, PreviousPane())
        assert state.pane is Pane.POLICIES

    def test_quit(self) -> None:
        _, effects = run(initial_state(), Quit())
        assert effects == [ExitConsole()]

    def test_move_targets_focused_pane(self) -> None:
        state = browsing_state("a", "b", "c", pane=Pane.OBJECTS)
        state, _ = run(state, MoveSelection(5))
        assert state.selection.selected_object == 2
        state, _ = run(state, JumpSelection(to_start=True))
        assert state.selection.selected_object == 0

    def test_move_in_policies_pane_is_ignored(self) -> None:
        state = browsing_state("a", "b", pane=Pane.POLICIES)
        assert step(state, MoveSelection(1)) == Transition(state)

    def test_load_selected_bucket(self) -> None:
        state = browsing_state(pane=Pane.BUCKETS)
        _, effects = run(state, LoadSelectedBucket())
        assert effects == [
            PushStatus(f"Loading objects for {DEFAULT_BUCKET}…"),
            LoadObjects(DEFAULT_BUCKET),
        ]

    def test_load_outside_buckets_pane_is_ignored(self) -> None:
        state = browsing_state(pane=Pane.OBJECTS)
        assert step(state, LoadSelectedBucket()).effects == ()

    def test_load_without_buckets_warns(self) -> None:
        _, effects = run(initial_state(), LoadSelectedBucket())
        assert warnings(effects) == ["Cannot load objects: No bucket selected"]

    def test_refresh_buckets(self) -> None:
        _, effects = run(initial_state(), RefreshBuckets())
        assert effects == [PushStatus("Refreshing buckets…"), LoadBuckets()]

    def test_inspect_highlighted_object(self) -> None:
        state = browsing_state("a", "b")
        state, _ = run(state, MoveSelection(1))
        _, effects = run(state, InspectObject())
        assert effects == [RefreshObject(bucket=DEFAULT_BUCKET, key="b")]

    def test_inspect_without_bucket_warns(self) -> None:
        _, effects = run(initial_state(), InspectObject())
        assert warnings(effects) == ["Inspect failed: Select a bucket first"]

    def test_clear_mask(self) -> None:
        state = browsing_state("logs/a", "b", mask=make_mask("logs/"))
        state, effects = run(state, ClearMask())
        assert state.selection.active_mask is None
        assert messages(effects) == ["Cleared mask filter"]

    def test_clear_without_mask_is_silent(self) -> None:
        state = browsing_state("a")
        assert step(state, ClearMask()) == Transition(state)

    def test_overlays(self) -> None:
        state, _ = run(initial_state(), OpenHelp())
        assert state.mode is Mode.SHOWING_HELP
        state, _ = run(state, Quit())
        assert state.mode is Mode.SHOWING_HELP
        state, _ = run(state, CloseOverlay())
        assert state.mode is Mode.BROWSING
        state, _ = run(state, OpenLog(), Cancel())
        assert state.mode is Mode.BROWSING


class TestMaskEditing:
    def test_start_uses_default_draft(self) -> None:
        state, effects = run(browsing_state("a"), StartMaskEdit())
        assert state.mode is Mode.EDITING_MASK
        assert state.draft == MaskDraft()
        assert state.draft.name == "Untitled mask"
        assert state.mask_field is MaskField.PATTERN
        assert messages(effects)[0].startswith("Mask editor active")

    def test_start_copies_active_mask(self) -> None:
        mask = make_mask(".gz", MaskKind.SUFFIX, name="archives", case_sensitive=True)
        state, _ = run(browsing_state("a.gz", mask=mask), StartMaskEdit())
        assert state.draft == MaskDraft("archives", ".gz", MaskKind.SUFFIX, True)

    def test_typing_and_applying(self) -> None:
        state = browsing_state("logs/a", "logs/b", "images/c")
        state, effects = run(
            state,
            StartMaskEdit(),
            *type_text("logs/x"),
            MaskBackspace(),
            Confirm(),
        )
        assert state.mode is Mode.BROWSING
        assert state.selection.active_mask is not None
        assert state.selection.active_mask.pattern == "logs/"
        assert state.selection.match_count == 2
        assert messages(effects)[-1] == "Mask 'Untitled mask' matched 2 objects"

    def test_typing_c_is_just_a_character(self) -> None:
        state, _ = run(browsing_state(), StartMaskEdit(), *type_text("cc"))
        assert state.draft.pattern == "cc"
        assert state.draft.case_sensitive is False

    def test_name_field(self) -> None:
        state, _ = run(
            browsing_state(),
            StartMaskEdit(),
            MaskFieldNext(),
            MaskFieldNext(),
            MaskFieldNext(),
            MaskBackspace(),
            *type_text("!"),
        )
        assert state.mask_field is MaskField.NAME
        assert state.draft.name == "Untitled mas!"

    def test_kind_and_case(self) -> None:
        state, _ = run(
            browsing_state(),
            StartMaskEdit(),
            CycleMaskKind(forward=False),
            ToggleMaskCase(),
        )
        assert state.draft.kind is MaskKind.REGEX
        assert state.draft.case_sensitive is True
        assert state.mask_field is MaskField.CASE

    def test_empty_pattern_stays_in_editor(self) -> None:
        state, effects = run(browsing_state("a"), StartMaskEdit(), Confirm())
        assert state.mode is Mode.EDITING_MASK
        assert warnings(effects) == ["Mask pattern cannot be empty"]

    def test_invalid_regex_never_becomes_active(self) -> None:
        previous = make_mask("logs/", name="previous")
        state = browsing_state("logs/a", "b", mask=previous)

        state, effects = run(
            state,
            StartMaskEdit(),
            CycleMaskKind(forward=False),
            MaskBackspace(),
            MaskBackspace(),
            MaskBackspace(),
            MaskBackspace(),
            MaskBackspace(),
            *type_text("(["),
            Confirm(),
        )

        assert state.mode is Mode.EDITING_MASK
        assert state.selection.active_mask == previous
        assert warnings(effects)[-1].startswith("Mask not applied: Invalid regex '(['")

    def test_cancel_discards_draft(self) -> None:
        state, effects = run(browsing_state("a"), StartMaskEdit(), *type_text("zz"), Cancel())
        assert state.mode is Mode.BROWSING
        assert state.selection.active_mask is None
        assert state.draft == MaskDraft()
        assert messages(effects)[-1] == "Mask edit cancelled"

    def test_browsing_commands_ignored_while_editing(self) -> None:
        state, _ = run(browsing_state("a"), StartMaskEdit())
        assert step(state, Quit()) == Transition(state)


class TestStorageSelection:
    def test_transition_requires_bucket(self) -> None:
        state, effects = run(initial_state(), BeginTransition())
        assert state.mode is Mode.BROWSING
        assert warnings(effects) == ["Storage selection unavailable: Select a bucket first"]

    def test_transition_requires_targets(self) -> None:
        state, effects = run(browsing_state(), BeginTransition())
        assert state.mode is Mode.BROWSING
        assert warnings(effects) == [
            "Storage selection unavailable: Select at least one object (mask or row)"
        ]

    def test_picker_cursor_is_clamped(self) -> None:
        state, _ = run(browsing_state("a"), BeginTransition())
        assert state.mode is Mode.SELECTING_STORAGE_CLASS
        assert state.storage_intent is StorageIntent.TRANSITION
        state, _ = run(state, MoveSelection(-1))
        assert state.tier_cursor == 0
        state, _ = run(state, MoveSelection(100))
        assert state.tier_cursor == len(SELECTABLE_TIERS) - 1

    def test_picker_cancel(self) -> None:
        state, _ = run(browsing_state("a"), BeginTransition(), Cancel())
        assert state.mode is Mode.BROWSING
        assert state.pending is None

    def test_choosing_tier_creates_pending_transition(self) -> None:
        state, effects = run(
            browsing_state("a"), BeginTransition(), MoveSelection(5), Confirm()
        )
        assert state.mode is Mode.CONFIRMING
        assert state.pending == TransitionAction(StorageTier.GLACIER, restore_first=False)
        assert messages(effects)[-1] == (
            "Confirm transition to Glacier Flexible Retrieval (press Enter to confirm)"
        )

    def test_save_policy_requires_mask(self) -> None:
        state, effects = run(browsing_state("a"), BeginSavePolicy())
        assert state.mode is Mode.BROWSING
        assert state.pending is None
        assert warnings(effects) == [
            "Cannot save policy: Apply a mask before saving a policy"
        ]

    def test_save_policy_flow(self) -> None:
        state = browsing_state("logs/a", mask=make_mask("logs/"))
        state, effects = run(state, BeginSavePolicy(), JumpSelection(to_start=False), Confirm())
        assert state.pending == SavePolicyAction(StorageTier.DEEP_ARCHIVE)
        assert messages(effects) == [
            "Select target storage class for policy",
            "Confirm saving policy",
        ]


class TestConfirming:
    @pytest.fixture
    def confirming(self) -> ConsoleState:
        state, _ = run(browsing_state("a", "b"), BeginTransition(), Confirm())
        assert state.mode is Mode.CONFIRMING
        return state

    def test_confirm_executes_and_clears_pending(self, confirming: ConsoleState) -> None:
        state, effects = run(confirming, Confirm())
        assert state.mode is Mode.BROWSING
        assert state.pending is None
        assert effects == [ExecuteAction(TransitionAction(StorageTier.STANDARD))]

    def test_cancel_clears_pending(self, confirming: ConsoleState) -> None:
        state, effects = run(confirming, Cancel())
        assert state.mode is Mode.BROWSING
        assert state.pending is None
        assert messages(effects) == ["Cancelled"]

    def test_toggle_restore_first(self, confirming: ConsoleState) -> None:
        state, effects = run(confirming, ToggleRestoreFirst())
        assert state.pending == TransitionAction(StorageTier.STANDARD, restore_first=True)
        state, more = run(state, ToggleRestoreFirst())
        assert state.pending == TransitionAction(StorageTier.STANDARD, restore_first=False)
        assert messages(effects + more) == [
            "Will request restore before transition",
            "Restore before transition disabled",
        ]

    def test_toggle_ignored_for_restore(self) -> None:
        state, _ = run(browsing_state("a"), BeginRestore())
        assert state.pending == RestoreAction(days=7)
        assert step(state, ToggleRestoreFirst()) == Transition(state)

    def test_restore_requires_targets(self) -> None:
        state, effects = run(browsing_state(), BeginRestore())
        assert state.mode is Mode.BROWSING
        assert warnings(effects) == ["Cannot request restore: Select objects to restore first"]

    def test_restore_prompt(self) -> None:
        _, effects = run(browsing_state("a"), BeginRestore())
        assert messages(effects) == ["Confirm restore request (Enter to proceed, Esc to cancel)"]

    @pytest.mark.parametrize("closing", [Confirm(), Cancel()])
    def test_pending_never_survives_leaving_confirmation(
        self, confirming: ConsoleState, closing: Event
    ) -> None:
        state, _ = run(confirming, closing)
        assert state.pending is None
