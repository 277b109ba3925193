"""Textual front end: four panes, a status bar and modal overlays.

The app holds no console state of its own. Every key is translated into an
event, dispatched to the ``Console``, and the whole screen is re-rendered from
the resulting state. While a dispatch is awaited no further key is handled.
"""

from __future__ import annotations

from rich.table import Table
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Header, Static

from tiershift.actions import RestoreAction, SavePolicyAction, TransitionAction
from tiershift.console import Console
from tiershift.events import Event, NextPane, PreviousPane
from tiershift.keymap import translate_key
from tiershift.machine import ConsoleState, MaskField, Mode, Pane, StorageIntent
from tiershift.models import SELECTABLE_TIERS, format_size
from tiershift.restore import describe_restore_state


VISIBLE_ROWS = 30
STATUS_ROWS = 3

HELP_LINES = (
    ("q", "Quit"),
    ("Tab / Shift+Tab", "Cycle panes"),
    ("Up / Down / PgUp / PgDn", "Move selection"),
    ("Home / End", "Jump to first / last"),
    ("Enter", "Load objects for the highlighted bucket"),
    ("m", "Edit mask"),
    ("Esc", "Clear active mask"),
    ("f", "Refresh buckets"),
    ("i", "Inspect highlighted object"),
    ("s", "Transition storage class"),
    ("r", "Request restore"),
    ("p", "Save policy for the active mask"),
    ("l", "Status log"),
    ("?", "This help"),
    ("Dialogs", "Enter/y confirm, Esc/n cancel, o toggle restore-first"),
)


def _window(count: int, cursor: int, height: int = VISIBLE_ROWS) -> range:
    """Rows to draw so that ``cursor`` stays visible."""
    if count <= height:
        return range(count)
    start = max(0, min(cursor - height // 2, count - height))
    return range(start, start + height)


def render_buckets(state: ConsoleState) -> Text:
    selection = state.selection
    text = Text()
    if not selection.buckets:
        text.append("No buckets loaded", style="dim")
        return text
    for index in _window(len(selection.buckets), selection.selected_bucket):
        bucket = selection.buckets[index]
        style = "reverse" if index == selection.selected_bucket else ""
        marker = "*" if bucket.name == selection.loaded_bucket else " "
        text.append(f"{marker} {bucket.name}", style=style)
        text.append(f"  {bucket.region or 'unknown region'}\n", style="dim")
    return text


def render_objects(state: ConsoleState) -> Table | Text:
    selection = state.selection
    if selection.loaded_bucket is None:
        return Text("Press Enter on a bucket to list its objects", style="dim")
    active = selection.active_objects()
    if not active:
        return Text("No objects", style="dim")
    table = Table(expand=True, box=None, show_edge=False)
    table.add_column("Key", ratio=3, no_wrap=True)
    table.add_column("Size", justify="right")
    table.add_column("Storage class")
    table.add_column("Restore")
    for index in _window(len(active), selection.selected_object):
        obj = active[index]
        table.add_row(
            obj.key,
            format_size(obj.size),
            obj.storage_tier.label,
            describe_restore_state(obj.restore_state),
            style="reverse" if index == selection.selected_object else None,
        )
    return table


def render_mask_editor(state: ConsoleState) -> Text:
    text = Text()
    editing = state.mode is Mode.EDITING_MASK
    if editing:
        draft = state.draft
        rows = (
            (MaskField.NAME, "Name", draft.name),
            (MaskField.PATTERN, "Pattern", draft.pattern),
            (MaskField.MODE, "Mode", draft.kind.value),
            (MaskField.CASE, "Case", "sensitive" if draft.case_sensitive else "insensitive"),
        )
        for field, label, value in rows:
            style = "bold reverse" if field is state.mask_field else ""
            text.append(f"{label:<8}", style="bold")
            text.append(f"{value}\n", style=style)
        return text
    mask = state.selection.active_mask
    if mask is None:
        text.append("No active mask (press m to create one)", style="dim")
    else:
        text.append(mask.summary())
        text.append(f"\n{state.selection.match_count} matching objects", style="dim")
    return text


def render_policies(state: ConsoleState) -> Text:
    if not state.policies:
        return Text("No saved policies", style="dim")
    return Text("\n".join(policy.describe() for policy in state.policies))


def render_status(lines: list[str]) -> Text:
    return Text("\n".join(lines))


def render_overlay(state: ConsoleState, log_lines: list[str]) -> Text | Table | None:
    match state.mode:
        case Mode.SHOWING_HELP:
            table = Table(title="Keys", box=None, show_header=False)
            table.add_column(style="bold")
            table.add_column()
            for keys, description in HELP_LINES:
                table.add_row(keys, description)
            return table
        case Mode.VIEWING_LOG:
            return Text("\n".join(log_lines) or "Log is empty", style="")
        case Mode.SELECTING_STORAGE_CLASS:
            purpose = (
                "Transition selected objects to"
                if state.storage_intent is StorageIntent.TRANSITION
                else "Save policy with target"
            )
            text = Text(f"{purpose}:\n\n", style="bold")
            for index, tier in enumerate(SELECTABLE_TIERS):
                style = "reverse" if index == state.tier_cursor else ""
                text.append(f"  {tier.label}\n", style=style)
            return text
        case Mode.CONFIRMING:
            return render_confirmation(state)
    return None


def render_confirmation(state: ConsoleState) -> Text:
    keys = state.selection.target_keys()
    text = Text()
    match state.pending:
        case TransitionAction(target_tier=tier, restore_first=restore_first):
            text.append(f"Transition {len(keys)} object(s) to {tier.label}?\n\n", style="bold")
            text.append(f"Restore first: {'yes' if restore_first else 'no'} (o to toggle)\n")
        case RestoreAction(days=days):
            text.append(f"Request a {days}-day restore for {len(keys)} object(s)?\n", style="bold")
        case SavePolicyAction(target_tier=tier):
            mask = state.selection.active_mask
            name = mask.name if mask is not None else "?"
            text.append(
                f"Save policy '{name}' -> {tier.label} for {state.selection.loaded_bucket}?\n",
                style="bold",
            )
        case None:
            text.append("Nothing to confirm\n")
    text.append("\nEnter/y confirm, Esc/n cancel", style="dim")
    return text


class TiershiftApp(App[None]):
    """Operator console for moving S3 objects between storage classes."""

    TITLE = "tiershift"

    CSS = """
    #body {
        height: 1fr;
    }

    .pane {
        border: round $panel;
        padding: 0 1;
        overflow: hidden;
    }

    .pane.focused {
        border: round $accent;
    }

    #buckets {
        width: 1fr;
    }

    #right {
        width: 3fr;
    }

    #objects {
        height: 3fr;
    }

    #mask-editor, #policies {
        height: 1fr;
    }

    #status {
        height: 5;
        border: round $panel;
        padding: 0 1;
    }

    #overlay {
        display: none;
        height: 1fr;
        margin: 1 8;
        padding: 1 2;
        border: thick $accent;
        background: $surface;
    }
    """

    BINDINGS = [
        Binding("tab", "pane(True)", "Next pane", show=False, priority=True),
        Binding("shift+tab", "pane(False)", "Previous pane", show=False, priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, console: Console) -> None:
        super().__init__()
        self.session = console

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="body"):
            yield Static(id="buckets", classes="pane")
            with Vertical(id="right"):
                yield Static(id="objects", classes="pane")
                with Horizontal():
                    yield Static(id="mask-editor", classes="pane")
                    yield Static(id="policies", classes="pane")
        yield Static(id="status")
        yield Static(id="overlay")

    async def on_mount(self) -> None:
        self.query_one("#buckets", Static).border_title = "Buckets"
        self.query_one("#objects", Static).border_title = "Objects"
        self.query_one("#mask-editor", Static).border_title = "Mask"
        self.query_one("#policies", Static).border_title = "Policies"
        await self.session.start()
        self.refresh_view()

    async def action_pane(self, forward: bool) -> None:
        """Tab is a pane switch while browsing and a field switch in the mask editor."""
        key = "tab" if forward else "shift+tab"
        event = translate_key(self.session.state, key)
        if event is None and self.session.state.mode is Mode.BROWSING:
            event = NextPane() if forward else PreviousPane()
        if event is not None:
            await self._dispatch(event)

    async def on_key(self, event: events.Key) -> None:
        console_event = translate_key(self.session.state, event.key, event.character)
        if console_event is None:
            return
        event.stop()
        await self._dispatch(console_event)

    async def _dispatch(self, event: Event) -> None:
        done = await self.session.dispatch(event)
        self.refresh_view()
        if done:
            self.exit()

    def refresh_view(self) -> None:
        state = self.session.state
        panes = {
            Pane.BUCKETS: ("#buckets", render_buckets(state)),
            Pane.OBJECTS: ("#objects", render_objects(state)),
            Pane.MASK_EDITOR: ("#mask-editor", render_mask_editor(state)),
            Pane.POLICIES: ("#policies", render_policies(state)),
        }
        for pane, (selector, renderable) in panes.items():
            widget = self.query_one(selector, Static)
            widget.update(renderable)
            widget.set_class(pane is state.pane, "focused")

        mask = state.selection.active_mask
        objects_title = f"Objects - {state.selection.loaded_bucket or 'no bucket'}"
        if mask is not None:
            objects_title += f" [mask: {mask.name}]"
        self.query_one("#objects", Static).border_title = objects_title

        status = self.session.status
        self.query_one("#status", Static).update(render_status(status.latest(STATUS_ROWS)))

        # Dialogs and read-only views take the place of the panes.
        overlay = self.query_one("#overlay", Static)
        content = render_overlay(state, status.latest(status.capacity))
        if content is not None:
            overlay.update(content)
        overlay.display = content is not None
        self.query_one("#body", Horizontal).display = content is None
