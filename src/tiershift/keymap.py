"""Key bindings: a pure translation from (mode, key) to a console event.

Key names follow Textual's (``"tab"``, ``"shift+tab"``, ``"pageup"``,
``"escape"``...); ``character`` is the printable character of the key, if any.
"""

from __future__ import annotations

from tiershift.events import (
    BeginRestore,
    BeginSavePolicy,
    BeginTransition,
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
    OpenHelp,
    OpenLog,
    PreviousPane,
    Quit,
    RefreshBuckets,
    StartMaskEdit,
    ToggleMaskCase,
    ToggleRestoreFirst,
)
from tiershift.machine import ConsoleState, MaskField, Mode


PAGE_SIZE = 5

_NAVIGATION: dict[str, Event] = {
    "up": MoveSelection(-1),
    "down": MoveSelection(1),
    "pageup": MoveSelection(-PAGE_SIZE),
    "pagedown": MoveSelection(PAGE_SIZE),
    "home": JumpSelection(to_start=True),
    "end": JumpSelection(to_start=False),
}

_BROWSING_KEYS: dict[str, Event] = {
    "tab": NextPane(),
    "shift+tab": PreviousPane(),
    "enter": LoadSelectedBucket(),
    "escape": ClearMask(),
    **_NAVIGATION,
}

_BROWSING_CHARACTERS: dict[str, Event] = {
    "q": Quit(),
    "m": StartMaskEdit(),
    "f": RefreshBuckets(),
    "i": InspectObject(),
    "s": BeginTransition(),
    "r": BeginRestore(),
    "p": BeginSavePolicy(),
    "?": OpenHelp(),
    "l": OpenLog(),
    "L": OpenLog(),
}


def _browsing(key: str, character: str | None) -> Event | None:
    if key in _BROWSING_KEYS:
        return _BROWSING_KEYS[key]
    return _BROWSING_CHARACTERS.get(character or "")


def _editing_mask(state: ConsoleState, key: str, character: str | None) -> Event | None:
    field = state.mask_field
    match key:
        case "escape":
            return Cancel()
        case "enter":
            return Confirm()
        case "tab":
            return MaskFieldNext()
        case "shift+tab":
            return MaskFieldPrevious()
        case "backspace":
            return MaskBackspace()
        case "left" if field is MaskField.MODE:
            return CycleMaskKind(forward=False)
        case "right" if field is MaskField.MODE:
            return CycleMaskKind(forward=True)
        case "space" if field is MaskField.MODE:
            return CycleMaskKind(forward=True)
        case "space" if field is MaskField.CASE:
            return ToggleMaskCase()
    if character and character.isprintable() and field in (MaskField.NAME, MaskField.PATTERN):
        return MaskInput(character)
    return None


def _selecting_storage_class(key: str) -> Event | None:
    match key:
        case "escape":
            return Cancel()
        case "enter":
            return Confirm()
    return _NAVIGATION.get(key)


def _confirming(key: str, character: str | None) -> Event | None:
    if key == "enter" or character == "y":
        return Confirm()
    if key == "escape" or character == "n":
        return Cancel()
    if character == "o":
        return ToggleRestoreFirst()
    return None


def _overlay(closers: tuple[str, ...], key: str, character: str | None) -> Event | None:
    if key in ("escape", "enter") or (character is not None and character in closers):
        return CloseOverlay()
    return None


def translate_key(state: ConsoleState, key: str, character: str | None = None) -> Event | None:
    """Event for ``key`` in the current mode, or ``None`` when the key is unbound."""
    match state.mode:
        case Mode.BROWSING:
            return _browsing(key, character)
        case Mode.EDITING_MASK:
            return _editing_mask(state, key, character)
        case Mode.SELECTING_STORAGE_CLASS:
            return _selecting_storage_class(key)
        case Mode.CONFIRMING:
            return _confirming(key, character)
        case Mode.SHOWING_HELP:
            return _overlay(("?",), key, character)
        case Mode.VIEWING_LOG:
            return _overlay(("l", "L"), key, character)
    raise AssertionError(f"Unhandled mode: {state.mode!r}")
