"""
Executor module - Runtime engine for workflows and task queues.

This module contains the execution components:
- scheduler: Pure next-batch selection and configuration checks
- graph: Dependency levels and structure summaries
- engine: WorkflowEngine (the coordinating loop)
- outcome: RunOutcome state machine (Completed/Failed/Stopped/Rejected)
- observer: State change notifications and snapshot persistence
- progress: Derived progress, durations and status counts
- protocol: StepExecutor, the host-supplied capability
"""

from pyorchestra.executor.engine import WorkflowEngine
from pyorchestra.executor.graph import GraphSummary, dependency_levels, level_graph, summarize
from pyorchestra.executor.observer import (
    DEFAULT_PREFIX,
    Observer,
    SnapshotWriter,
    StateChange,
    load_snapshot,
)
from pyorchestra.executor.outcome import (
    Completed,
    Failed,
    Rejected,
    RunOutcome,
    Stopped,
    is_completed,
    is_failed,
    is_rejected,
    is_stopped,
)
from pyorchestra.executor.progress import (
    duration,
    estimated_time_remaining,
    group_progress,
    member_progress,
    status_counts,
    task_progress,
)
from pyorchestra.executor.protocol import FunctionExecutor, StepContext, StepExecutor
from pyorchestra.executor.scheduler import (
    ConfigurationError,
    blocked_members,
    find_cycle,
    is_eligible,
    priority_weight,
    select_next,
    sort_by_priority,
    validate_members,
)

__all__ = [
    # Engine
    "WorkflowEngine",
    # RunOutcome state machine
    "Completed",
    "Failed",
    "Stopped",
    "Rejected",
    "RunOutcome",
    "is_completed",
    "is_failed",
    "is_stopped",
    "is_rejected",
    # Scheduling
    "ConfigurationError",
    "select_next",
    "priority_weight",
    "sort_by_priority",
    "is_eligible",
    "blocked_members",
    "find_cycle",
    "validate_members",
    # Graph
    "GraphSummary",
    "summarize",
    "dependency_levels",
    "level_graph",
    # Progress
    "task_progress",
    "member_progress",
    "group_progress",
    "duration",
    "estimated_time_remaining",
    "status_counts",
    # Observers
    "StateChange",
    "Observer",
    "SnapshotWriter",
    "load_snapshot",
    "DEFAULT_PREFIX",
    # Host capability
    "StepExecutor",
    "FunctionExecutor",
    "StepContext",
]
