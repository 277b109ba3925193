"""
Migration orchestrator - the only place where backend effects are executed.

The state machine describes what should happen; this module talks to the
storage backend and the policy store, reports every outcome to the status log,
and hands fresh data back to the state machine as feedback events.

Batch semantics:
    - Keys are processed sequentially, one outstanding request at a time.
    - A failure is isolated to its key; the batch always runs to the end.
    - With restore-first, a failed restore skips the transition of that key only.
    - After a transition batch the loaded bucket is re-listed so displayed
      tiers reflect what the backend now reports.
"""

from __future__ import annotations

import logging
from typing import Never

from tiershift.actions import RestoreAction, SavePolicyAction, TransitionAction
from tiershift.backend.protocols import StorageBackend
from tiershift.effects import BackendEffect, ExecuteAction, LoadBuckets, LoadObjects, RefreshObject
from tiershift.errors import BackendError, describe_error
from tiershift.events import (
    BucketsLoaded,
    Event,
    ObjectRefreshed,
    ObjectsLoaded,
    PoliciesChanged,
)
from tiershift.machine import ConsoleState
from tiershift.models import StorageTier
from tiershift.policy import MigrationPolicy, PolicyStore
from tiershift.result import Failure, Result, Success, partition_results
from tiershift.status import StatusLog
from tiershift.validation import validate_model, validation_message


logger = logging.getLogger(__name__)

RESTORE_BEFORE_TRANSITION_DAYS = 7


def assert_never(value: Never) -> Never:
    """Exhaustiveness guard for ``match`` over closed unions."""
    raise AssertionError(f"Unhandled case: {value!r}")


class MigrationOrchestrator:
    """Executes backend effects on behalf of the console.

    Attributes:
        backend: Storage backend every remote call goes through.
        policy_store: Owner of the saved policies.
        status: Status log receiving one line per outcome.
    """

    def __init__(
        self,
        backend: StorageBackend,
        policy_store: PolicyStore,
        status: StatusLog,
    ) -> None:
        self.backend = backend
        self.policy_store = policy_store
        self.status = status

    async def interpret(self, effect: BackendEffect, state: ConsoleState) -> list[Event]:
        """Run ``effect`` against the backend.

        Args:
            effect: Effect produced by the state machine.
            state: Console state at the time the effect was produced; selection
                targets are resolved from it.

        Returns:
            Feedback events for the state machine, in order.
        """
        match effect:
            case LoadBuckets():
                return await self._load_buckets()
            case LoadObjects(bucket=bucket):
                return await self._load_objects(bucket)
            case RefreshObject(bucket=bucket, key=key):
                return await self._refresh_object(bucket, key)
            case ExecuteAction(action=action):
                match action:
                    case TransitionAction(target_tier=tier, restore_first=restore_first):
                        return await self._execute_transition(state, tier, restore_first)
                    case RestoreAction(days=days):
                        return await self._execute_restore(state, days)
                    case SavePolicyAction(target_tier=tier):
                        return self._save_policy(state, tier)
                    case _:
                        assert_never(action)
            case _:
                assert_never(effect)

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    async def _load_buckets(self) -> list[Event]:
        match await self.backend.list_buckets():
            case Success(buckets):
                return [BucketsLoaded(buckets=tuple(buckets))]
            case Failure(error):
                self._warn(f"Failed to load buckets: {describe_error(error)}")
                return []

    async def _load_objects(self, bucket: str) -> list[Event]:
        match await self.backend.list_objects(bucket):
            case Success(objects):
                return [ObjectsLoaded(bucket=bucket, objects=tuple(objects))]
            case Failure(error):
                self._warn(f"Failed to load objects for {bucket}: {describe_error(error)}")
                return []

    async def _refresh_object(self, bucket: str, key: str) -> list[Event]:
        match await self.backend.refresh_object(bucket, key):
            case Success(info):
                return [ObjectRefreshed(bucket=bucket, info=info)]
            case Failure(error):
                self._warn(f"Inspect failed: {describe_error(error)}")
                return []

    # -------------------------------------------------------------------------
    # Confirmed actions
    # -------------------------------------------------------------------------

    async def _execute_transition(
        self, state: ConsoleState, tier: StorageTier, restore_first: bool
    ) -> list[Event]:
        bucket = state.selection.loaded_bucket
        if bucket is None:
            self._warn("Cannot transition: Select a bucket first")
            return []
        keys = state.selection.target_keys()
        if not keys:
            self.status.push("No objects selected for transition")
            return []

        logger.info(
            "Transition batch: %d keys in %s -> %s (restore_first=%s)",
            len(keys),
            bucket,
            tier.value,
            restore_first,
        )
        outcomes: list[Result[str, BackendError]] = []
        for key in keys:
            if restore_first:
                match await self.backend.request_restore(
                    bucket, key, RESTORE_BEFORE_TRANSITION_DAYS
                ):
                    case Failure(error):
                        self._warn(f"Restore failed for {key}: {describe_error(error)}")
                        outcomes.append(Failure(error))
                        continue
                    case Success(_):
                        self.status.push(f"Restore requested for {key}")

            match await self.backend.transition_storage_class(bucket, key, tier):
                case Success(_):
                    self.status.push(f"Transitioned {key} to {tier.label}")
                    outcomes.append(Success(key))
                case Failure(error):
                    self._warn(f"Transition failed for {key}: {describe_error(error)}")
                    outcomes.append(Failure(error))

        self._summarize("Transition", outcomes, f"moved to {tier.label}")
        return await self._load_objects(bucket)

    async def _execute_restore(self, state: ConsoleState, days: int) -> list[Event]:
        bucket = state.selection.loaded_bucket
        if bucket is None:
            self._warn("Cannot request restore: Select a bucket first")
            return []
        keys = state.selection.target_keys()
        if not keys:
            self.status.push("No objects selected for restore")
            return []

        outcomes: list[Result[str, BackendError]] = []
        for key in keys:
            match await self.backend.request_restore(bucket, key, days):
                case Success(_):
                    self.status.push(f"Restore requested for {key}")
                    outcomes.append(Success(key))
                case Failure(error):
                    self._warn(f"Restore failed for {key}: {describe_error(error)}")
                    outcomes.append(Failure(error))

        self._summarize("Restore", outcomes, f"requested for {days} days")
        return []

    def _save_policy(self, state: ConsoleState, tier: StorageTier) -> list[Event]:
        selection = state.selection
        if selection.loaded_bucket is None:
            self._warn("Cannot save policy: Select a bucket first")
            return []
        if selection.active_mask is None:
            self._warn("Cannot save policy: Apply a mask before saving a policy")
            return []

        match validate_model(
            MigrationPolicy,
            bucket=selection.loaded_bucket,
            mask=selection.active_mask,
            target_tier=tier,
        ):
            case Failure(exc):
                self._warn(f"Cannot save policy: {validation_message(exc)}")
                return []
            case Success(policy):
                return self._persist(policy)

    def _persist(self, policy: MigrationPolicy) -> list[Event]:
        match self.policy_store.add(policy):
            case Failure(write_error):
                self._warn(
                    f"Cannot save policy: could not write {write_error.path}: {write_error.message}"
                )
                return []
            case Success(policies):
                self.status.push("Policy saved")
                return [PoliciesChanged(policies=policies)]

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def _warn(self, message: str) -> None:
        self.status.push(message, level="warning")

    def _summarize(
        self, label: str, outcomes: list[Result[str, BackendError]], verb_phrase: str
    ) -> None:
        """One closing line for multi-key batches; single keys already have theirs."""
        if len(outcomes) < 2:
            return
        done, problems = partition_results(outcomes)
        self.status.push(
            f"{label} batch complete: {len(done)}/{len(outcomes)} objects {verb_phrase}"
            + (f", {len(problems)} with errors" if problems else "")
        )
