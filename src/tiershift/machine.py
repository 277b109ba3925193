"""
Interaction state machine - a pure function from (state, event) to (state, effects).

``step`` never performs I/O. Remote calls, policy writes and status lines are
returned as effect descriptions for the orchestrator to execute, which keeps
every row of the transition table testable without a backend or a screen.

Modes:
    BROWSING                 panes, selection, entry point for every flow
    EDITING_MASK             mask draft being edited
    SELECTING_STORAGE_CLASS  tier picker for a transition or a policy
    CONFIRMING               a PendingAction awaits confirmation
    SHOWING_HELP, VIEWING_LOG  read-only overlays

The pending action slot is written only on the way into CONFIRMING and
cleared only on the way out of it. Commands that mean nothing in the current
mode leave the state untouched and produce no effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from tiershift.actions import (
    DEFAULT_RESTORE_DAYS,
    PendingAction,
    RestoreAction,
    SavePolicyAction,
    TransitionAction,
)
from tiershift.effects import (
    Effect,
    ExecuteAction,
    ExitConsole,
    LoadBuckets,
    LoadObjects,
    PushStatus,
    RefreshObject,
)
from tiershift.errors import ValidationFailed, describe_error
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
    MaskFieldPrevious,
    MaskInput,
    MoveSelection,
    NextPane,
    ObjectRefreshed,
    ObjectsLoaded,
    OpenHelp,
    OpenLog,
    PoliciesChanged,
    PreviousPane,
    Quit,
    RefreshBuckets,
    StartMaskEdit,
    ToggleMaskCase,
    ToggleRestoreFirst,
)
from tiershift.mask import MaskKind, ObjectMask, compile_mask
from tiershift.models import SELECTABLE_TIERS
from tiershift.policy import MigrationPolicy
from tiershift.result import Failure, Success
from tiershift.selection import SelectionModel


class Mode(Enum):
    BROWSING = "browsing"
    EDITING_MASK = "editing_mask"
    CONFIRMING = "confirming"
    SELECTING_STORAGE_CLASS = "selecting_storage_class"
    SHOWING_HELP = "showing_help"
    VIEWING_LOG = "viewing_log"


class Pane(Enum):
    BUCKETS = "buckets"
    OBJECTS = "objects"
    MASK_EDITOR = "mask_editor"
    POLICIES = "policies"

    def next(self) -> Pane:
        order = list(Pane)
        return order[(order.index(self) + 1) % len(order)]

    def previous(self) -> Pane:
        order = list(Pane)
        return order[(order.index(self) - 1) % len(order)]


class MaskField(Enum):
    NAME = "name"
    PATTERN = "pattern"
    MODE = "mode"
    CASE = "case"

    def next(self) -> MaskField:
        order = list(MaskField)
        return order[(order.index(self) + 1) % len(order)]

    def previous(self) -> MaskField:
        order = list(MaskField)
        return order[(order.index(self) - 1) % len(order)]


class StorageIntent(Enum):
    TRANSITION = "transition"
    SAVE_POLICY = "save_policy"


@dataclass(frozen=True)
class MaskDraft:
    """Mask editor contents; validated only when applied."""

    name: str = "Untitled mask"
    pattern: str = ""
    kind: MaskKind = MaskKind.PREFIX
    case_sensitive: bool = False

    @classmethod
    def from_mask(cls, mask: ObjectMask) -> MaskDraft:
        return cls(
            name=mask.name,
            pattern=mask.pattern,
            kind=mask.kind,
            case_sensitive=mask.case_sensitive,
        )


@dataclass(frozen=True)
class ConsoleState:
    """Everything the console shows and every intent in flight.

    Attributes:
        mode: Current interaction mode.
        pane: Focused pane while browsing.
        selection: Buckets, objects and the active mask.
        draft: Mask editor contents.
        mask_field: Focused mask editor field.
        storage_intent: What the tier picker is choosing a tier for.
        tier_cursor: Highlighted row of the tier picker.
        pending: The single action awaiting confirmation.
        policies: Saved policies as last reported by the policy store.
    """

    mode: Mode = Mode.BROWSING
    pane: Pane = Pane.BUCKETS
    selection: SelectionModel = field(default_factory=SelectionModel)
    draft: MaskDraft = field(default_factory=MaskDraft)
    mask_field: MaskField = MaskField.PATTERN
    storage_intent: StorageIntent = StorageIntent.TRANSITION
    tier_cursor: int = 0
    pending: PendingAction | None = None
    policies: tuple[MigrationPolicy, ...] = ()


@dataclass(frozen=True)
class Transition:
    """Result of one ``step``: the next state and the effects to run, in order."""

    state: ConsoleState
    effects: tuple[Effect, ...] = ()


def initial_state(policies: tuple[MigrationPolicy, ...] = ()) -> ConsoleState:
    return ConsoleState(policies=policies)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _stay(state: ConsoleState) -> Transition:
    return Transition(state)


def _status(message: str) -> PushStatus:
    return PushStatus(message=message)


def _invalid(context: str, message: str) -> PushStatus:
    detail = describe_error(ValidationFailed(message=message))
    return PushStatus(message=f"{context}: {detail}", level="warning")


def _mask_count_status(selection: SelectionModel) -> PushStatus:
    mask = selection.active_mask
    assert mask is not None
    if selection.match_count == 0:
        return _status("Mask applied but matched no objects")
    return _status(f"Mask '{mask.name}' matched {selection.match_count} objects")


# ---------------------------------------------------------------------------
# Backend feedback (accepted in every mode)
# ---------------------------------------------------------------------------


def _feedback(state: ConsoleState, event: Event) -> Transition | None:
    match event:
        case BucketsLoaded(buckets=buckets):
            selection = state.selection.set_buckets(buckets)
            return Transition(
                replace(state, selection=selection),
                (_status(f"Loaded {len(selection.buckets)} buckets"),),
            )
        case ObjectsLoaded(bucket=bucket, objects=objects):
            selection = state.selection.set_objects(objects, bucket=bucket)
            effects: list[Effect] = []
            if selection.active_mask is not None:
                selection = selection.apply_mask(selection.active_mask)
                effects.append(_mask_count_status(selection))
            effects.append(_status(f"Loaded {len(selection.objects)} objects for bucket {bucket}"))
            return Transition(replace(state, selection=selection), tuple(effects))
        case ObjectRefreshed(bucket=bucket, info=info):
            if bucket != state.selection.loaded_bucket:
                return _stay(state)
            return Transition(
                replace(state, selection=state.selection.replace_object(info)),
                (_status(f"Object metadata refreshed for {info.key}"),),
            )
        case PoliciesChanged(policies=policies):
            return Transition(replace(state, policies=policies))
    return None


# ---------------------------------------------------------------------------
# Per-mode handlers
# ---------------------------------------------------------------------------


def _browsing(state: ConsoleState, event: Event) -> Transition:
    selection = state.selection
    match event:
        case Quit():
            return Transition(state, (ExitConsole(),))
        case NextPane():
            return Transition(replace(state, pane=state.pane.next()))
        case PreviousPane():
            return Transition(replace(state, pane=state.pane.previous()))
        case MoveSelection(delta=delta):
            match state.pane:
                case Pane.BUCKETS:
                    return Transition(replace(state, selection=selection.move_bucket(delta)))
                case Pane.OBJECTS:
                    return Transition(replace(state, selection=selection.move_object(delta)))
            return _stay(state)
        case JumpSelection(to_start=to_start):
            match state.pane:
                case Pane.BUCKETS:
                    return Transition(replace(state, selection=selection.jump_bucket(to_start)))
                case Pane.OBJECTS:
                    return Transition(replace(state, selection=selection.jump_object(to_start)))
            return _stay(state)
        case LoadSelectedBucket():
            if state.pane is not Pane.BUCKETS:
                return _stay(state)
            bucket = selection.selected_bucket_name()
            if bucket is None:
                return Transition(state, (_invalid("Cannot load objects", "No bucket selected"),))
            return Transition(state, (_status(f"Loading objects for {bucket}…"), LoadObjects(bucket)))
        case RefreshBuckets():
            return Transition(state, (_status("Refreshing buckets…"), LoadBuckets()))
        case InspectObject():
            return _begin_inspect(state)
        case StartMaskEdit():
            mask = selection.active_mask
            draft = MaskDraft.from_mask(mask) if mask is not None else MaskDraft()
            return Transition(
                replace(state, mode=Mode.EDITING_MASK, draft=draft, mask_field=MaskField.PATTERN),
                (
                    _status(
                        "Mask editor active - Tab moves between fields, "
                        "arrows/space adjust options, Enter applies"
                    ),
                ),
            )
        case ClearMask():
            if selection.active_mask is None:
                return _stay(state)
            return Transition(
                replace(state, selection=selection.apply_mask(None)),
                (_status("Cleared mask filter"),),
            )
        case BeginTransition():
            return _begin_storage_selection(state, StorageIntent.TRANSITION)
        case BeginSavePolicy():
            return _begin_storage_selection(state, StorageIntent.SAVE_POLICY)
        case BeginRestore():
            if selection.loaded_bucket is None or not selection.target_keys():
                return Transition(
                    state,
                    (_invalid("Cannot request restore", "Select objects to restore first"),),
                )
            return Transition(
                replace(
                    state,
                    mode=Mode.CONFIRMING,
                    pending=RestoreAction(days=DEFAULT_RESTORE_DAYS),
                ),
                (_status("Confirm restore request (Enter to proceed, Esc to cancel)"),),
            )
        case OpenHelp():
            return Transition(replace(state, mode=Mode.SHOWING_HELP))
        case OpenLog():
            return Transition(replace(state, mode=Mode.VIEWING_LOG))
    return _stay(state)


def _begin_inspect(state: ConsoleState) -> Transition:
    bucket = state.selection.loaded_bucket
    if bucket is None:
        return Transition(state, (_invalid("Inspect failed", "Select a bucket first"),))
    obj = state.selection.selected_object_info()
    if obj is None:
        return Transition(state, (_invalid("Inspect failed", "Select an object to inspect"),))
    return Transition(state, (RefreshObject(bucket=bucket, key=obj.key),))


def _begin_storage_selection(state: ConsoleState, intent: StorageIntent) -> Transition:
    selection = state.selection
    match intent:
        case StorageIntent.TRANSITION:
            context = "Storage selection unavailable"
            if selection.loaded_bucket is None:
                return Transition(state, (_invalid(context, "Select a bucket first"),))
            if not selection.target_keys():
                return Transition(
                    state, (_invalid(context, "Select at least one object (mask or row)"),)
                )
            effects: tuple[Effect, ...] = ()
        case StorageIntent.SAVE_POLICY:
            context = "Cannot save policy"
            if selection.loaded_bucket is None:
                return Transition(state, (_invalid(context, "Select a bucket first"),))
            if selection.active_mask is None:
                return Transition(
                    state, (_invalid(context, "Apply a mask before saving a policy"),)
                )
            effects = (_status("Select target storage class for policy"),)
    return Transition(
        replace(
            state,
            mode=Mode.SELECTING_STORAGE_CLASS,
            storage_intent=intent,
            tier_cursor=0,
        ),
        effects,
    )


def _editing_mask(state: ConsoleState, event: Event) -> Transition:
    draft = state.draft
    match event:
        case Cancel():
            return Transition(
                replace(state, mode=Mode.BROWSING, draft=MaskDraft()),
                (_status("Mask edit cancelled"),),
            )
        case Confirm():
            return _apply_draft(state)
        case MaskFieldNext():
            return Transition(replace(state, mask_field=state.mask_field.next()))
        case MaskFieldPrevious():
            return Transition(replace(state, mask_field=state.mask_field.previous()))
        case MaskInput(text=text):
            match state.mask_field:
                case MaskField.NAME:
                    return Transition(replace(state, draft=replace(draft, name=draft.name + text)))
                case MaskField.PATTERN:
                    return Transition(
                        replace(state, draft=replace(draft, pattern=draft.pattern + text))
                    )
            return _stay(state)
        case MaskBackspace():
            match state.mask_field:
                case MaskField.NAME:
                    return Transition(replace(state, draft=replace(draft, name=draft.name[:-1])))
                case MaskField.PATTERN:
                    return Transition(
                        replace(state, draft=replace(draft, pattern=draft.pattern[:-1]))
                    )
            return _stay(state)
        case CycleMaskKind(forward=forward):
            kind = draft.kind.next() if forward else draft.kind.previous()
            return Transition(replace(state, draft=replace(draft, kind=kind)))
        case ToggleMaskCase():
            return Transition(
                replace(
                    state,
                    draft=replace(draft, case_sensitive=not draft.case_sensitive),
                    mask_field=MaskField.CASE,
                )
            )
    return _stay(state)


def _apply_draft(state: ConsoleState) -> Transition:
    draft = state.draft
    if not draft.pattern:
        return Transition(state, (PushStatus("Mask pattern cannot be empty", level="warning"),))
    match compile_mask(draft.name, draft.pattern, draft.kind, draft.case_sensitive):
        case Failure(error):
            return Transition(
                state, (_invalid("Mask not applied", error.message),)
            )
        case Success(mask):
            selection = state.selection.apply_mask(mask)
            return Transition(
                replace(state, mode=Mode.BROWSING, selection=selection),
                (_mask_count_status(selection),),
            )


def _selecting_storage_class(state: ConsoleState, event: Event) -> Transition:
    last = len(SELECTABLE_TIERS) - 1
    match event:
        case Cancel():
            return Transition(replace(state, mode=Mode.BROWSING))
        case MoveSelection(delta=delta):
            cursor = max(0, min(state.tier_cursor + delta, last))
            return Transition(replace(state, tier_cursor=cursor))
        case JumpSelection(to_start=to_start):
            return Transition(replace(state, tier_cursor=0 if to_start else last))
        case Confirm():
            tier = SELECTABLE_TIERS[state.tier_cursor]
            match state.storage_intent:
                case StorageIntent.TRANSITION:
                    return Transition(
                        replace(
                            state,
                            mode=Mode.CONFIRMING,
                            pending=TransitionAction(target_tier=tier, restore_first=False),
                        ),
                        (_status(f"Confirm transition to {tier.label} (press Enter to confirm)"),),
                    )
                case StorageIntent.SAVE_POLICY:
                    return Transition(
                        replace(
                            state,
                            mode=Mode.CONFIRMING,
                            pending=SavePolicyAction(target_tier=tier),
                        ),
                        (_status("Confirm saving policy"),),
                    )
    return _stay(state)


def _confirming(state: ConsoleState, event: Event) -> Transition:
    match event:
        case Cancel():
            return Transition(
                replace(state, mode=Mode.BROWSING, pending=None),
                (_status("Cancelled"),),
            )
        case ToggleRestoreFirst():
            match state.pending:
                case TransitionAction() as action:
                    toggled = action.toggled()
                    message = (
                        "Will request restore before transition"
                        if toggled.restore_first
                        else "Restore before transition disabled"
                    )
                    return Transition(replace(state, pending=toggled), (_status(message),))
            return _stay(state)
        case Confirm():
            action = state.pending
            done = replace(state, mode=Mode.BROWSING, pending=None)
            if action is None:
                return Transition(done)
            return Transition(done, (ExecuteAction(action=action),))
    return _stay(state)


def _overlay(state: ConsoleState, event: Event) -> Transition:
    match event:
        case CloseOverlay() | Cancel() | Confirm():
            return Transition(replace(state, mode=Mode.BROWSING))
    return _stay(state)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def step(state: ConsoleState, event: Event) -> Transition:
    """Advance the console by one event.

    Args:
        state: Current console state (never mutated).
        event: Operator command or backend feedback.

    Returns:
        The next state plus the effects to execute, in order.
    """
    feedback = _feedback(state, event)
    if feedback is not None:
        return feedback

    match state.mode:
        case Mode.BROWSING:
            return _browsing(state, event)
        case Mode.EDITING_MASK:
            return _editing_mask(state, event)
        case Mode.SELECTING_STORAGE_CLASS:
            return _selecting_storage_class(state, event)
        case Mode.CONFIRMING:
            return _confirming(state, event)
        case Mode.SHOWING_HELP | Mode.VIEWING_LOG:
            return _overlay(state, event)
    raise AssertionError(f"Unhandled mode: {state.mode!r}")
