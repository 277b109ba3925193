"""
Console - single owner of all mutable console state.

The console feeds events through the pure ``step`` function and executes the
resulting effects in order: status lines go to the status log, the exit effect
stops the loop, everything else is handed to the migration orchestrator whose
feedback events are queued and stepped in turn. Nothing else mutates the
state, so no locking is needed.
"""

from __future__ import annotations

import logging
from collections import deque

from tiershift.backend.protocols import StorageBackend
from tiershift.effects import (
    Effect,
    ExecuteAction,
    ExitConsole,
    LoadBuckets,
    LoadObjects,
    PushStatus,
    RefreshObject,
)
from tiershift.events import Event
from tiershift.machine import ConsoleState, initial_state, step
from tiershift.orchestrator import MigrationOrchestrator, assert_never
from tiershift.policy import PolicyStore
from tiershift.status import StatusLog


logger = logging.getLogger(__name__)


class Console:
    """Event loop owner used by the TUI (and by tests in its place).

    Usage:
        ```python
        console = Console.create(backend, PolicyStore.open(PolicyFile(path)))
        await console.start()
        while console.running:
            await console.dispatch(next_event())
        ```
    """

    def __init__(self, orchestrator: MigrationOrchestrator, state: ConsoleState) -> None:
        self.orchestrator = orchestrator
        self.state = state
        self.running = True

    @classmethod
    def create(
        cls,
        backend: StorageBackend,
        policy_store: PolicyStore,
        status: StatusLog | None = None,
    ) -> Console:
        orchestrator = MigrationOrchestrator(backend, policy_store, status or StatusLog())
        return cls(orchestrator, initial_state(policy_store.policies))

    @property
    def status(self) -> StatusLog:
        return self.orchestrator.status

    async def start(self) -> None:
        """Initial bucket load; its feedback is stepped like any dispatched event."""
        feedback = await self._run((PushStatus("Loading buckets…"), LoadBuckets()))
        await self._drain(deque(feedback))

    async def dispatch(self, event: Event) -> bool:
        """Step ``event`` and everything it triggers.

        Returns:
            True once the console has been asked to exit.
        """
        await self._drain(deque([event]))
        return not self.running

    async def _drain(self, pending: deque[Event]) -> None:
        while pending:
            transition = step(self.state, pending.popleft())
            self.state = transition.state
            pending.extend(await self._run(transition.effects))

    async def _run(self, effects: tuple[Effect, ...]) -> list[Event]:
        feedback: list[Event] = []
        for effect in effects:
            match effect:
                case PushStatus(message=message, level=level):
                    self.status.push(message, level)
                case ExitConsole():
                    logger.info("Exit requested")
                    self.running = False
                case LoadBuckets() | LoadObjects() | RefreshObject() | ExecuteAction():
                    feedback.extend(await self.orchestrator.interpret(effect, self.state))
                case _:
                    assert_never(effect)
        return feedback
