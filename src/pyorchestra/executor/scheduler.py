"""
Scheduler - decides which members run next.

Design Principle: Single Responsibility (SOLID)
The scheduler has ONE job: given members, the in-flight set and a
concurrency budget, compute the next members to start. It does NOT
execute anything (that is the WorkflowEngine's job) and it never mutates
the members it is given.

Every function in this module is pure, so the engine can call them on
every scheduling pass and tests can call them directly.

Usage:
    in_flight = {"fetch"}
    batch = select_next(workflow.steps, in_flight, concurrency_limit=3)
    for step in batch:
        ...  # dispatch
"""

import logging
from collections.abc import Collection, Iterable, Iterator, Sequence
from typing import TypeVar

from pyorchestra.models import Member, MemberStatus, Priority

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Member)

__all__ = [
    "ConfigurationError",
    "select_next",
    "priority_weight",
    "sort_by_priority",
    "is_eligible",
    "blocked_members",
    "find_cycle",
    "validate_members",
]


class ConfigurationError(Exception):
    """
    A workflow or queue cannot be run as configured.

    Raised for dependency cycles, duplicate member ids, a concurrency
    limit below 1 or a negative retry budget. Detected before anything is
    dispatched.
    """

    pass


def priority_weight(priority: Priority) -> int:
    """Weight used for ordering: urgent=4, high=3, medium=2, low=1."""
    return priority.weight


def sort_by_priority(members: Iterable[M]) -> list[M]:
    """Order members by priority weight, highest first.

    ``sorted`` is stable, so members of equal priority keep their original
    relative order.
    """
    return sorted(members, key=lambda m: priority_weight(m.priority), reverse=True)


def is_eligible(
    member: Member,
    statuses: dict[str, MemberStatus],
    in_flight: Collection[str],
) -> bool:
    """Check whether a member may start now.

    Args:
        member: Candidate member
        statuses: Status of every member in the run, keyed by id
        in_flight: Ids of members currently executing

    A dependency id that is not part of the run counts as satisfied.
    """
    if member.status != MemberStatus.PENDING or member.id in in_flight:
        return False

    return all(
        statuses[dep] == MemberStatus.COMPLETED for dep in member.dependencies if dep in statuses
    )


def select_next(
    members: Sequence[M],
    in_flight: Collection[str],
    concurrency_limit: int,
) -> list[M]:
    """
    Compute the ordered list of members to start next.

    Filters to PENDING members whose dependencies are all COMPLETED and
    that are not in flight, orders them by priority (stable), and returns
    at most ``concurrency_limit - len(in_flight)`` of them.

    Args:
        members: Every member of the run, in insertion order
        in_flight: Ids of members currently executing
        concurrency_limit: Maximum number of members in flight at once

    Returns:
        Members to start, possibly empty

    Raises:
        ConfigurationError: If concurrency_limit is below 1

    Example:
        ```python
        # A (no deps), B and C depend on A
        select_next([a, b, c], in_flight=set(), concurrency_limit=2)  # [a]
        a.status = MemberStatus.COMPLETED
        select_next([a, b, c], in_flight=set(), concurrency_limit=2)  # [b, c]
        ```
    """
    if concurrency_limit < 1:
        raise ConfigurationError(f"Concurrency limit must be >= 1, got {concurrency_limit}")

    available_slots = concurrency_limit - len(in_flight)
    if available_slots <= 0:
        return []

    statuses = {m.id: m.status for m in members}
    eligible = [m for m in members if is_eligible(m, statuses, in_flight)]

    return sort_by_priority(eligible)[:available_slots]


def blocked_members(members: Sequence[M]) -> list[M]:
    """
    Find pending members that can never become eligible in this run.

    A member is blocked when one of its dependencies is FAILED or SKIPPED.
    A dependency that is merely PENDING or RUNNING is "not yet satisfied"
    and does not block.

    Only direct dependencies are inspected; callers apply this repeatedly
    (marking the result SKIPPED each time) to cascade through the graph.
    """
    statuses = {m.id: m.status for m in members}

    return [
        m
        for m in members
        if m.status == MemberStatus.PENDING
        and any(dep in statuses and statuses[dep].is_blocking for dep in m.dependencies)
    ]


def find_cycle(members: Sequence[Member]) -> list[str] | None:
    """
    Find a dependency cycle among members.

    Uses DFS with an explicit stack of dependency iterators, so long
    chains do not grow the call stack. Dependencies on ids outside the
    member set are ignored.

    Returns:
        The cycle as a path of ids whose first and last entries are equal
        (for example ``["a", "b", "a"]``), or None if the graph is acyclic.
    """
    graph: dict[str, list[str]] = {m.id: list(m.dependencies) for m in members}

    visited: set[str] = set()

    for root in graph:
        if root in visited:
            continue

        visited.add(root)
        path: list[str] = [root]
        on_path: set[str] = {root}
        stack: list[Iterator[str]] = [iter(graph[root])]

        while stack:
            descended = False
            for dep in stack[-1]:
                if dep not in graph:
                    continue
                if dep in on_path:
                    return path[path.index(dep) :] + [dep]
                if dep not in visited:
                    visited.add(dep)
                    path.append(dep)
                    on_path.add(dep)
                    stack.append(iter(graph[dep]))
                    descended = True
                    break

            if not descended:
                stack.pop()
                on_path.discard(path.pop())

    return None


def validate_members(members: Sequence[Member], concurrency: int) -> None:
    """
    Validate a run's configuration before anything is dispatched.

    Checks for:
    - A concurrency limit below 1
    - Duplicate member ids
    - Negative retry budgets
    - Cycles in the dependency graph (including self-dependencies)

    Raises:
        ConfigurationError: Describing the first problem found
    """
    if concurrency < 1:
        raise ConfigurationError(f"Concurrency must be >= 1, got {concurrency}")

    seen: set[str] = set()
    for member in members:
        if member.id in seen:
            raise ConfigurationError(f"Duplicate member id '{member.id}'")
        seen.add(member.id)

        if member.max_retries < 0:
            raise ConfigurationError(
                f"Member '{member.id}' has negative max_retries ({member.max_retries})"
            )

    for member in members:
        for dep in member.dependencies:
            if dep not in seen:
                logger.debug(
                    f"Member '{member.id}' depends on '{dep}' which is not part of this run; "
                    "treating it as satisfied"
                )

    cycle = find_cycle(members)
    if cycle:
        raise ConfigurationError(f"Dependency cycle detected: {' -> '.join(cycle)}")
