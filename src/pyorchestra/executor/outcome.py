"""
Run outcomes returned by WorkflowEngine.run().

**Design Pattern**: State Machine using Union types

A run ends in exactly one of four ways, and the caller is told which one
explicitly instead of inspecting the group afterwards.

Example:
    ```python
    outcome = await engine.run()

    match outcome:
        case Completed(results):
            print(f"Done: {results}")
        case Failed(failed, errors):
            print(f"Failed members: {failed}")
        case Stopped(pending):
            print(f"Paused with {len(pending)} members left")
        case Rejected(error):
            print(f"Configuration error: {error}")
    ```
"""

from dataclasses import dataclass, field
from typing import Any

from pyorchestra.executor.scheduler import ConfigurationError

__all__ = [
    "Completed",
    "Failed",
    "Stopped",
    "Rejected",
    "RunOutcome",
    "is_completed",
    "is_failed",
    "is_stopped",
    "is_rejected",
]


@dataclass(frozen=True)
class Completed:
    """
    Every member completed.

    Attributes:
        results: Outputs of all members, keyed by member id
    """

    results: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"Completed({len(self.results)} results)"


@dataclass(frozen=True)
class Failed:
    """
    At least one member failed terminally.

    Members that completed before or alongside the failure keep their
    COMPLETED status; nothing is rolled back.

    Attributes:
        failed: Ids of terminally failed members, in insertion order
        errors: Failure payloads of those members, keyed by id
    """

    failed: list[str]
    errors: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"Failed(failed={self.failed})"


@dataclass(frozen=True)
class Stopped:
    """
    The run was stopped before every member was terminal.

    Attributes:
        pending: Ids of members that will run when the group is resumed
    """

    pending: list[str]

    def __str__(self) -> str:
        return f"Stopped(pending={self.pending})"


@dataclass(frozen=True)
class Rejected:
    """
    The run was refused before any dispatch.

    Attributes:
        error: What is wrong with the configuration
    """

    error: ConfigurationError

    def __str__(self) -> str:
        return f"Rejected({self.error})"


# RunOutcome is a Union type representing the result of one run.
#
# Pattern matching:
#     match outcome:
#         case Completed(results): ...
#         case Failed(failed, errors): ...
#
RunOutcome = Completed | Failed | Stopped | Rejected


def is_completed(outcome: RunOutcome) -> bool:
    """Type guard to check if outcome is Completed."""
    return isinstance(outcome, Completed)


def is_failed(outcome: RunOutcome) -> bool:
    """Type guard to check if outcome is Failed."""
    return isinstance(outcome, Failed)


def is_stopped(outcome: RunOutcome) -> bool:
    """Type guard to check if outcome is Stopped."""
    return isinstance(outcome, Stopped)


def is_rejected(outcome: RunOutcome) -> bool:
    """Type guard to check if outcome is Rejected."""
    return isinstance(outcome, Rejected)
