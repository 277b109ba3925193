# tests/conftest.py
"""Global PyTest fixtures for the tiershift test-suite.

Nothing here talks to AWS: the storage backend is ``InMemoryBackend`` and the
policy file lives in ``tmp_path`` or in memory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tiershift.backend.memory import InMemoryBackend
from tiershift.console import Console
from tiershift.models import StorageTier
from tiershift.orchestrator import MigrationOrchestrator
from tiershift.policy import PolicyFile, PolicyStore
from tiershift.status import StatusLog

from tests.helpers import DEFAULT_BUCKET, MemoryPolicyPersistence, make_objects


@pytest.fixture
def backend() -> InMemoryBackend:
    """Two buckets; the default one holds a mix of logs and images."""
    return InMemoryBackend(
        {
            DEFAULT_BUCKET: list(
                make_objects("logs/2023/a.log", "logs/2023/b.log", "logs/2024/c.log")
                + make_objects("images/cat.JPG", "images/dog.png", tier=StorageTier.GLACIER)
            ),
            "backups": list(make_objects("db.dump")),
        }
    )


@pytest.fixture
def persistence() -> MemoryPolicyPersistence:
    return MemoryPolicyPersistence()


@pytest.fixture
def policy_store(persistence: MemoryPolicyPersistence) -> PolicyStore:
    return PolicyStore.open(persistence)


@pytest.fixture
def policy_file(tmp_path: Path) -> PolicyFile:
    return PolicyFile(tmp_path / "config" / "policies.jsonl")


@pytest.fixture
def status() -> StatusLog:
    return StatusLog(capacity=50)


@pytest.fixture
def orchestrator(
    backend: InMemoryBackend, policy_store: PolicyStore, status: StatusLog
) -> MigrationOrchestrator:
    return MigrationOrchestrator(backend, policy_store, status)


@pytest.fixture
def console(backend: InMemoryBackend, policy_store: PolicyStore, status: StatusLog) -> Console:
    return Console.create(backend, policy_store, status)
