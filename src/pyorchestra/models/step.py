"""Units of execution: commands inside a task and steps of a workflow."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pyorchestra.models.priority import Priority
from pyorchestra.models.status import MemberStatus, StepStatus


@dataclass
class Command:
    """One ordered unit of work inside a Task.

    Commands have no dependencies of their own: a task runs its commands
    in list order and the task's progress counts the completed ones.
    """

    id: str
    """Identifier, unique within the owning task."""

    name: str

    description: str = ""

    estimated_time: float = 0
    """Informational estimate in seconds."""

    status: StepStatus = StepStatus.PENDING

    result: Any = None
    """Executor output, set once the command completes."""

    error: Any = None
    """Failure payload (the raised exception), set once the command fails."""

    duration: float | None = None
    """Seconds spent in the last attempt, set on terminal status."""


@dataclass
class Step:
    """A member of a Workflow.

    The ``action`` and ``input`` fields are opaque to the engine; they are
    what the host's step executor interprets.
    """

    id: str
    """Identifier, unique within the owning workflow."""

    name: str

    description: str = ""

    action: Any = None
    """Opaque step description handed to the step executor."""

    input: Any = None

    dependencies: list[str] = field(default_factory=list)
    """Ids of steps that must be COMPLETED before this one is eligible."""

    priority: Priority = Priority.MEDIUM

    status: MemberStatus = MemberStatus.PENDING

    retry_count: int = 0
    max_retries: int = 2

    result: Any = None
    error: Any = None

    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float | None = None

    @property
    def progress(self) -> int:
        """100 once completed, 0 otherwise."""
        from pyorchestra.executor.progress import member_progress

        return member_progress(self)
