"""
StepExecutor - the host-supplied capability that performs a unit of work.

The engine has no opinion on what a step does. It hands the executor a
step description plus the outputs of the step's dependencies, and stores
whatever comes back (or whatever is raised) verbatim.

Design Principle: Dependency Inversion (SOLID)
The engine depends on this protocol, not on LLM clients, file scanners or
any other concrete worker.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

__all__ = ["StepExecutor", "FunctionExecutor", "StepContext"]

StepContext = dict[str, Any]
"""Outputs of completed dependencies, keyed by member (or command) id."""


@runtime_checkable
class StepExecutor(Protocol):
    """
    Runs one step and returns its output.

    For a workflow Step, ``step`` is the Step itself. For a queued Task,
    the engine calls ``execute`` once per Command, in order.

    Any Exception raised is treated as a failure of the member and handed
    to the retry policy. Raise a RetryableError whose ``is_retryable()``
    returns False to fail permanently.

    Example:
        ```python
        class ScanExecutor:
            async def execute(self, step, context):
                return await scan_directory(step.action, previous=context)
        ```
    """

    async def execute(self, step: Any, context: StepContext) -> Any: ...


class FunctionExecutor:
    """
    Adapts a plain coroutine function to the StepExecutor protocol.

    Example:
        ```python
        async def run_step(step, context):
            return f"ran {step.name}"

        engine = WorkflowEngine(workflow, FunctionExecutor(run_step))
        ```
    """

    def __init__(self, fn: Callable[[Any, StepContext], Awaitable[Any]]):
        self._fn = fn

    async def execute(self, step: Any, context: StepContext) -> Any:
        return await self._fn(step, context)

    def __repr__(self) -> str:
        return f"FunctionExecutor({getattr(self._fn, '__name__', self._fn)!r})"
