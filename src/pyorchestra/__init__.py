"""
pyorchestra: Workflow and task queue execution for Python

Runs workflows of steps and queues of tasks under one engine, honoring
priorities, dependencies, a concurrency budget and retry policies, and
reporting progress as it goes.

Design Pattern: Façade Pattern
This module provides a simplified interface to the package, hiding the
split between models, scheduling, execution and storage.

Example:
    ```python
    import asyncio
    from pyorchestra import (
        ExecutionMode,
        FunctionExecutor,
        WorkflowEngine,
        create_step,
        create_workflow,
    )

    async def run_step(step, context):
        return f"{step.action} done"

    async def main():
        fetch = create_step("fetch", "download", step_id="fetch")
        parse = create_step("parse", "parse", step_id="parse", dependencies=["fetch"])
        workflow = create_workflow(
            "Ingest", "Fetch then parse", [fetch, parse], mode=ExecutionMode.CONDITIONAL
        )

        outcome = await WorkflowEngine(workflow, FunctionExecutor(run_step)).run()
        print(outcome, workflow.progress)

    asyncio.run(main())
    ```
"""

# Core types
from pyorchestra.models import (
    Command,
    ExecutionMode,
    Group,
    GroupStatus,
    Member,
    MemberStatus,
    Priority,
    QueuePriority,
    RetryableError,
    RetryPolicy,
    Step,
    StepStatus,
    Task,
    TaskQueue,
    Workflow,
    is_retryable,
)

# Configuration
from pyorchestra.config import ExecutionSettings

# Factories
from pyorchestra.factory import (
    create_command,
    create_queue,
    create_step,
    create_task,
    create_workflow,
)

# Execution
from pyorchestra.executor import (
    Completed,
    ConfigurationError,
    Failed,
    FunctionExecutor,
    Rejected,
    RunOutcome,
    SnapshotWriter,
    StateChange,
    StepExecutor,
    Stopped,
    WorkflowEngine,
    dependency_levels,
    duration,
    estimated_time_remaining,
    group_progress,
    is_completed,
    is_failed,
    is_rejected,
    is_stopped,
    level_graph,
    load_snapshot,
    member_progress,
    select_next,
    status_counts,
    summarize,
    task_progress,
)

# Storage (Adapter pattern)
from pyorchestra.storage import InMemoryStateStore, StateStore, StorageError

# Version
__version__ = "0.1.0"

__all__ = [
    # Core types
    "Command",
    "Step",
    "Task",
    "Workflow",
    "TaskQueue",
    "Member",
    "Group",
    "StepStatus",
    "MemberStatus",
    "GroupStatus",
    "ExecutionMode",
    "Priority",
    "QueuePriority",
    "RetryPolicy",
    "RetryableError",
    "is_retryable",
    # Configuration
    "ExecutionSettings",
    # Factories
    "create_command",
    "create_task",
    "create_step",
    "create_workflow",
    "create_queue",
    # Execution
    "WorkflowEngine",
    "StepExecutor",
    "FunctionExecutor",
    "RunOutcome",
    "Completed",
    "Failed",
    "Stopped",
    "Rejected",
    "is_completed",
    "is_failed",
    "is_stopped",
    "is_rejected",
    "ConfigurationError",
    "select_next",
    # Graph
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
    "SnapshotWriter",
    "load_snapshot",
    # Storage
    "StateStore",
    "StorageError",
    "InMemoryStateStore",
    # Metadata
    "__version__",
]
