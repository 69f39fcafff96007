"""
Pytest configuration and fixtures for pyorchestra tests.

Provides reusable fixtures for storage backends, a scripted step
executor, and hypothesis strategies for member graphs.
"""

import asyncio
import shutil
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
from hypothesis import strategies as st

from pyorchestra.models import MemberStatus, Priority, Step
from pyorchestra.storage import InMemoryStateStore
from pyorchestra.storage.sqlite import SqliteStateStore


class RecordingExecutor:
    """
    Step executor scripted per step (or command) id.

    Records every call, the context it received, and the highest number of
    calls that were in flight at once.

    Example:
        executor = RecordingExecutor().fail("b", times=1)
    """

    def __init__(self, delay: float = 0.001):
        self.delay = delay
        self.delays: dict[str, float] = {}
        self.results: dict[str, Any] = {}
        self.calls: list[str] = []
        self.contexts: dict[str, dict[str, Any]] = {}
        self.active = 0
        self.max_active = 0
        self._failures: dict[str, list] = {}

    def fail(self, step_id: str, times: int = 1_000, error: Exception | None = None):
        """Make ``step_id`` raise on its next ``times`` calls."""
        self._failures[step_id] = [times, error]
        return self

    def slow(self, step_id: str, delay: float):
        self.delays[step_id] = delay
        return self

    def returns(self, step_id: str, value: Any):
        self.results[step_id] = value
        return self

    def call_count(self, step_id: str) -> int:
        return self.calls.count(step_id)

    async def execute(self, step: Any, context: dict[str, Any]) -> Any:
        key = step.id
        self.calls.append(key)
        self.contexts[key] = dict(context)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delays.get(key, self.delay))
            plan = self._failures.get(key)
            if plan and plan[0] > 0:
                plan[0] -= 1
                raise plan[1] or RuntimeError(f"{key} failed")
            return self.results.get(key, f"{key}-done")
        finally:
            self.active -= 1


def make_step(
    step_id: str,
    *dependencies: str,
    priority: Priority = Priority.MEDIUM,
    retries: int = 0,
) -> Step:
    """Build a step whose name and action are its id."""
    return Step(
        id=step_id,
        name=step_id,
        action=step_id,
        dependencies=list(dependencies),
        priority=priority,
        max_retries=retries,
    )


@pytest.fixture
def executor() -> RecordingExecutor:
    """Scripted executor with a 1ms delay per call."""
    return RecordingExecutor()


@pytest.fixture
def step_factory():
    """The make_step builder, for tests that prefer fixtures."""
    return make_step


@pytest.fixture
async def in_memory_store() -> AsyncGenerator[InMemoryStateStore, None]:
    """Async in-memory store fixture with automatic cleanup."""
    store = InMemoryStateStore()
    yield store
    await store.reset()


@pytest.fixture
async def sqlite_memory_store() -> AsyncGenerator[SqliteStateStore, None]:
    """Async SQLite in-memory store fixture with automatic cleanup."""
    store = SqliteStateStore(":memory:")
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
def temp_db_path():
    """Temporary database file path with automatic cleanup."""
    tmpdir = Path(tempfile.mkdtemp())
    db_path = tmpdir / "state.db"
    yield db_path
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
async def sqlite_file_store(temp_db_path: Path) -> AsyncGenerator[SqliteStateStore, None]:
    """Async SQLite file-based store fixture with automatic cleanup."""
    store = SqliteStateStore(str(temp_db_path))
    await store.connect()
    yield store
    await store.close()


# Hypothesis strategies for property-based testing


@st.composite
def member_graph_strategy(draw, max_size: int = 8):
    """
    Strategy for acyclic member lists with random statuses and priorities.

    Dependencies only point at earlier members, so the graph is acyclic by
    construction.
    """
    size = draw(st.integers(min_value=0, max_value=max_size))
    members = []
    for index in range(size):
        deps = draw(
            st.lists(st.integers(min_value=0, max_value=max(index - 1, 0)), max_size=3)
            if index > 0
            else st.just([])
        )
        members.append(
            Step(
                id=f"m{index}",
                name=f"m{index}",
                dependencies=sorted({f"m{d}" for d in deps}),
                priority=draw(st.sampled_from(list(Priority))),
                status=draw(
                    st.sampled_from(
                        [
                            MemberStatus.PENDING,
                            MemberStatus.PENDING,
                            MemberStatus.RUNNING,
                            MemberStatus.COMPLETED,
                            MemberStatus.FAILED,
                        ]
                    )
                ),
            )
        )
    return members


# Register helpers for easy import
pytest.member_graph_strategy = member_graph_strategy
pytest.make_step = make_step
pytest.RecordingExecutor = RecordingExecutor
