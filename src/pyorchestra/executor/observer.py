"""
State change notifications and snapshot persistence.

Design Pattern: Observer Pattern
The engine is the subject: after every mutation it emits a StateChange to
each registered observer. Observers render, log or persist it; the engine
does not wait for them to agree and does not let them break a run.

SnapshotWriter is the stock observer that persists the whole group through
a StateStore. Snapshots are eventually-consistent overwrites of one key per
group, not a transaction log.

Example:
    ```python
    store = InMemoryStateStore()
    engine = (
        WorkflowEngine(workflow, executor)
        .with_observer(lambda change: print(change.member_id, change.member_status))
        .with_store(store)
    )
    await engine.run()

    restored = await load_snapshot(store, workflow.id)
    ```
"""

import logging
import pickle
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from pyorchestra.models import Group, GroupStatus, MemberStatus
from pyorchestra.storage.base import StateStore, StorageError

logger = logging.getLogger(__name__)

__all__ = [
    "StateChange",
    "Observer",
    "SnapshotWriter",
    "load_snapshot",
    "DEFAULT_PREFIX",
]

DEFAULT_PREFIX = "pyorchestra:"


@dataclass(frozen=True)
class StateChange:
    """
    One "state changed" notification.

    Attributes:
        group_id: Workflow or queue id
        group_status: Group status after the mutation
        progress: Group progress after the mutation
        member_id: Member that changed, None for group-level changes
        member_status: Status of that member after the mutation
        member_progress: Progress of that member after the mutation
        group: The live group object (read it, do not mutate it)
        timestamp: When the change was emitted
    """

    group_id: str
    group_status: GroupStatus
    progress: int
    member_id: str | None = None
    member_status: MemberStatus | None = None
    member_progress: int | None = None
    group: Group | None = field(default=None, repr=False, compare=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


Observer = Callable[[StateChange], Awaitable[None] | None]
"""Callback receiving every StateChange; may be sync or async."""


class SnapshotWriter:
    """
    Observer that persists a pickled snapshot of the group on every change.

    Usage:
        writer = SnapshotWriter(store)
        engine = WorkflowEngine(workflow, executor).with_observer(writer)
    """

    def __init__(self, store: StateStore, prefix: str = DEFAULT_PREFIX):
        self._store = store
        self._prefix = prefix
        self.writes = 0

    @property
    def store(self) -> StateStore:
        return self._store

    def key_for(self, group_id: str) -> str:
        return f"{self._prefix}{group_id}"

    async def __call__(self, change: StateChange) -> None:
        if change.group is None:
            return

        try:
            data = pickle.dumps(change.group)
        except Exception as e:
            raise StorageError(f"Failed to serialize group {change.group_id}: {e}") from e

        await self._store.put(self.key_for(change.group_id), data)
        self.writes += 1


async def load_snapshot(
    store: StateStore, group_id: str, prefix: str = DEFAULT_PREFIX
) -> Group | None:
    """
    Read back the latest snapshot written by a SnapshotWriter.

    Returns:
        The unpickled Workflow or TaskQueue, or None if nothing was written

    Raises:
        StorageError: If the stored bytes cannot be deserialized
    """
    data = await store.get(f"{prefix}{group_id}")
    if data is None:
        return None

    try:
        return pickle.loads(data)
    except Exception as e:
        raise StorageError(f"Failed to deserialize snapshot of {group_id}: {e}") from e
