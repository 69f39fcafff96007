"""Queued task composed of ordered commands."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pyorchestra.models.priority import Priority
from pyorchestra.models.status import MemberStatus
from pyorchestra.models.step import Command


@dataclass
class Task:
    """A titled unit of work composed of ordered Commands.

    Tasks are the members of a TaskQueue. The engine runs a task by handing
    each pending command to the step executor in order; the task completes
    when every command has completed.

    Design: Derived Progress
        ``progress`` is computed from the commands on every read and is
        never stored, so it cannot drift from the command statuses.
    """

    id: str
    title: str
    description: str = ""

    component: str = "General"
    """Category label used by hosts to group tasks."""

    priority: Priority = Priority.MEDIUM
    status: MemberStatus = MemberStatus.PENDING

    dependencies: list[str] = field(default_factory=list)
    """Ids of tasks that must be COMPLETED before this one is eligible."""

    commands: list[Command] = field(default_factory=list)

    current_command: int | None = None
    """Index of the command currently (or most recently) running."""

    retry_count: int = 0
    max_retries: int = 2

    result: Any = None
    """Output of the last command once the task completes."""

    error: Any = None

    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float | None = None

    @property
    def progress(self) -> int:
        """Percentage of completed commands, 0 when there are none."""
        from pyorchestra.executor.progress import task_progress

        return task_progress(self)
