"""
Factories for commands, tasks, steps, workflows and queues.

Design Pattern: Factory Functions
Callers describe what they want; the factories fill in generated ids,
initial statuses and retry budgets so every new member starts in a
consistent PENDING state.

Ids are time-ordered UUIDv7 strings, so members created later sort later.

Example:
    ```python
    task = create_task(
        "Add login form",
        "Build the login form component",
        [
            {"name": "scaffold", "description": "Create the component"},
            {"name": "test", "description": "Write tests", "estimated_time": 120},
        ],
        priority=Priority.HIGH,
        component="Frontend",
    )
    queue = create_queue("Sprint 12", "Frontend work", [task], concurrency=3)
    ```
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from uuid_extensions import uuid7

from pyorchestra.models import (
    Command,
    ExecutionMode,
    Priority,
    QueuePriority,
    RetryPolicy,
    Step,
    Task,
    TaskQueue,
    Workflow,
)

__all__ = [
    "create_command",
    "create_task",
    "create_step",
    "create_workflow",
    "create_queue",
    "new_id",
]


def new_id() -> str:
    """Generate a time-ordered unique id."""
    return str(uuid7())


def create_command(name: str, description: str = "", estimated_time: float = 0) -> Command:
    """Create a PENDING command with a generated id."""
    return Command(
        id=new_id(),
        name=name,
        description=description,
        estimated_time=estimated_time,
    )


def _to_command(item: Command | Mapping[str, Any]) -> Command:
    if isinstance(item, Command):
        return item
    if "name" not in item:
        raise ValueError(f"Command mapping needs a 'name': {dict(item)}")
    return create_command(
        item["name"],
        item.get("description", ""),
        item.get("estimated_time", 0),
    )


def create_task(
    title: str,
    description: str,
    commands: Iterable[Command | Mapping[str, Any]],
    *,
    priority: Priority = Priority.MEDIUM,
    component: str = "General",
    dependencies: Sequence[str] | None = None,
    retry_policy: RetryPolicy = RetryPolicy.STANDARD,
) -> Task:
    """
    Create a PENDING task from ordered commands.

    Args:
        title: Task title
        description: Free text
        commands: Command objects, or mappings with ``name`` and optional
            ``description`` / ``estimated_time``
        priority: Scheduling priority
        component: Category label
        dependencies: Ids of tasks that must complete first
        retry_policy: Supplies the task's retry budget

    Raises:
        ValueError: If a command mapping has no name
    """
    return Task(
        id=new_id(),
        title=title,
        description=description,
        component=component,
        priority=priority,
        dependencies=list(dependencies or []),
        commands=[_to_command(c) for c in commands],
        max_retries=retry_policy.max_retries,
    )


def create_step(
    name: str,
    action: Any,
    *,
    step_id: str | None = None,
    description: str = "",
    input: Any = None,
    dependencies: Sequence[str] | None = None,
    priority: Priority = Priority.MEDIUM,
    retry_policy: RetryPolicy = RetryPolicy.STANDARD,
) -> Step:
    """Create a PENDING workflow step. ``step_id`` defaults to a generated id."""
    return Step(
        id=step_id or new_id(),
        name=name,
        description=description,
        action=action,
        input=input,
        dependencies=list(dependencies or []),
        priority=priority,
        max_retries=retry_policy.max_retries,
    )


def create_workflow(
    name: str,
    description: str,
    steps: Sequence[Step],
    *,
    mode: ExecutionMode = ExecutionMode.SEQUENTIAL,
    concurrency: int = 2,
    priority: QueuePriority = QueuePriority.MEDIUM,
    chain: bool = False,
) -> Workflow:
    """
    Create an IDLE workflow.

    Args:
        steps: Steps in insertion order
        mode: Execution mode
        concurrency: Maximum steps in flight at once
        priority: Workflow priority
        chain: Make each step depend on the one before it

    Example:
        ```python
        workflow = create_workflow(
            "Release",
            "Build then publish",
            [create_step("build", "make"), create_step("publish", "upload")],
            mode=ExecutionMode.CONDITIONAL,
            chain=True,
        )
        ```
    """
    steps = list(steps)
    if chain:
        for previous, step in zip(steps, steps[1:]):
            if previous.id not in step.dependencies:
                step.dependencies.append(previous.id)

    return Workflow(
        id=new_id(),
        name=name,
        description=description,
        steps=steps,
        mode=mode,
        concurrency=concurrency,
        priority=priority,
    )


def create_queue(
    name: str,
    description: str,
    tasks: Sequence[Task],
    *,
    concurrency: int = 2,
    priority: QueuePriority = QueuePriority.MEDIUM,
) -> TaskQueue:
    """Create an IDLE task queue."""
    return TaskQueue(
        id=new_id(),
        name=name,
        description=description,
        tasks=list(tasks),
        concurrency=concurrency,
        priority=priority,
    )
