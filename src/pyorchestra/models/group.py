"""Groups of members run under one policy: workflows and task queues."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pyorchestra.models.priority import QueuePriority
from pyorchestra.models.status import ExecutionMode, GroupStatus, MemberStatus
from pyorchestra.models.step import Step
from pyorchestra.models.task import Task


@dataclass
class Workflow:
    """A flat, ordered list of Steps run in one execution mode.

    Design: Aggregate Root
        The workflow owns its steps. A WorkflowEngine holds the workflow by
        reference and is the only thing that mutates it during a run.
    """

    id: str
    name: str
    description: str = ""
    steps: list[Step] = field(default_factory=list)
    mode: ExecutionMode = ExecutionMode.SEQUENTIAL

    concurrency: int = 2
    """Maximum number of steps in flight at once (>= 1)."""

    status: GroupStatus = GroupStatus.IDLE
    priority: QueuePriority = QueuePriority.MEDIUM

    results: dict[str, Any] = field(default_factory=dict)
    """Outputs of completed steps, keyed by step id."""

    current_step: int | None = None
    """Index of the most recently started step."""

    start_time: datetime | None = None
    end_time: datetime | None = None

    error: str | None = None
    """Configuration failure message when a run was rejected."""

    @property
    def members(self) -> list[Step]:
        return self.steps

    @property
    def currently_running(self) -> int:
        return sum(1 for step in self.steps if step.status == MemberStatus.RUNNING)

    @property
    def progress(self) -> int:
        from pyorchestra.executor.progress import group_progress

        return group_progress(self)


@dataclass
class TaskQueue:
    """A collection of Tasks scheduled by priority and dependencies.

    Queues always run dependency-gated: a task whose dependency failed is
    skipped while independent tasks keep running.
    """

    id: str
    name: str
    description: str = ""
    tasks: list[Task] = field(default_factory=list)
    concurrency: int = 2
    status: GroupStatus = GroupStatus.IDLE
    priority: QueuePriority = QueuePriority.MEDIUM
    results: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    start_time: datetime | None = None
    end_time: datetime | None = None
    error: str | None = None

    @property
    def mode(self) -> ExecutionMode:
        return ExecutionMode.CONDITIONAL

    @property
    def members(self) -> list[Task]:
        return self.tasks

    @property
    def currently_running(self) -> int:
        return sum(1 for task in self.tasks if task.status == MemberStatus.RUNNING)

    @property
    def progress(self) -> int:
        from pyorchestra.executor.progress import group_progress

        return group_progress(self)


Member = Step | Task
"""Anything a WorkflowEngine schedules."""

Group = Workflow | TaskQueue
"""Anything a WorkflowEngine owns."""
