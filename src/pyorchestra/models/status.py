"""Status enumerations for workflow and queue execution tracking.

Defines lifecycle states for commands inside a task, for schedulable
members (workflow steps and queued tasks), and for the groups that own them.
"""

from enum import Enum


class StepStatus(Enum):
    """Status of a single command inside a task.

    Lifecycle:
        PENDING → RUNNING → COMPLETED/FAILED

    Design: No SKIPPED Status
        Commands run in order inside their task. Only whole members can be
        skipped when a dependency can never complete.
    """

    PENDING = "pending"
    """Command has not started yet."""

    RUNNING = "running"
    """Command is being executed."""

    COMPLETED = "completed"
    """Command finished and its result is recorded."""

    FAILED = "failed"
    """Command raised and its error is recorded."""

    @property
    def is_terminal(self) -> bool:
        """Check if this status is terminal."""
        return self in (StepStatus.COMPLETED, StepStatus.FAILED)

    def __str__(self) -> str:
        return self.value


class MemberStatus(Enum):
    """Status of a schedulable member (workflow step or queued task).

    Lifecycle:
        PENDING → RUNNING → COMPLETED/FAILED
        RUNNING → FAILED → PENDING (retry authorized)
        PENDING → SKIPPED (dependency can never complete)
        RUNNING → PAUSED → PENDING (group stopped, then resumed)
    """

    PENDING = "pending"
    """Member waits for its dependencies and a free slot."""

    RUNNING = "running"
    """Member is in flight."""

    COMPLETED = "completed"
    """Member finished successfully."""

    FAILED = "failed"
    """Member failed after exhausting its retries."""

    SKIPPED = "skipped"
    """Member will not run in this attempt because a dependency failed."""

    PAUSED = "paused"
    """Member was in flight when its group was stopped."""

    @property
    def is_terminal(self) -> bool:
        """Check if this status is final for the current execution attempt."""
        return self in (MemberStatus.COMPLETED, MemberStatus.FAILED, MemberStatus.SKIPPED)

    @property
    def is_blocking(self) -> bool:
        """Check if a dependency in this status can never reach COMPLETED."""
        return self in (MemberStatus.FAILED, MemberStatus.SKIPPED)

    def __str__(self) -> str:
        return self.value


class GroupStatus(Enum):
    """Status of a workflow or task queue.

    Lifecycle:
        IDLE → RUNNING → COMPLETED/FAILED
        RUNNING → PAUSED → RUNNING (resumed by another run)
    """

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if this status is terminal (no more work will be dispatched)."""
        return self in (GroupStatus.COMPLETED, GroupStatus.FAILED)

    def __str__(self) -> str:
        return self.value


class ExecutionMode(Enum):
    """How a workflow drives its members."""

    SEQUENTIAL = "sequential"
    """Strict list order, one member at a time, abort on failure."""

    PARALLEL = "parallel"
    """Dispatch as slots free up, fail-fast by default."""

    CONDITIONAL = "conditional"
    """Dependency-gated dispatch, dependents of failures are skipped."""

    def __str__(self) -> str:
        return self.value
