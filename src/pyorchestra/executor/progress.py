"""Progress aggregation for tasks, workflows and queues.

Every figure here is derived from member and command statuses at the
moment it is requested. Nothing is cached, so a status mutation is
reflected by the next read.
"""

from __future__ import annotations

import math
from collections import Counter
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pyorchestra.models.status import MemberStatus, StepStatus

if TYPE_CHECKING:
    from pyorchestra.models import Group, Member, Task

__all__ = [
    "task_progress",
    "member_progress",
    "group_progress",
    "duration",
    "estimated_time_remaining",
    "status_counts",
]


def _round_half_up(value: float) -> int:
    # round() would give banker's rounding (round(62.5) == 62)
    return math.floor(value + 0.5)


def task_progress(task: Task) -> int:
    """Percentage of a task's commands that completed.

    Example:
        A task with 4 commands, 3 completed and 1 pending, reports 75.
    """
    if not task.commands:
        return 0

    completed = sum(1 for cmd in task.commands if cmd.status == StepStatus.COMPLETED)
    return _round_half_up(100 * completed / len(task.commands))


def member_progress(member: Member) -> int:
    """Progress of any schedulable member.

    Tasks report their command progress. Steps have no sub-units, so a
    step is either done (100) or not (0).
    """
    if hasattr(member, "commands"):
        return task_progress(member)
    return 100 if member.status == MemberStatus.COMPLETED else 0


def group_progress(group: Group) -> int:
    """Mean member progress of a workflow or queue, 0 when empty.

    Example:
        A queue with two tasks at 50 and 100 reports 75.
    """
    members = group.members
    if not members:
        return 0

    total = sum(member_progress(m) for m in members)
    return _round_half_up(total / len(members))


def duration(member: Member, now: datetime | None = None) -> int:
    """Whole seconds between a member's start and end (or now while running)."""
    if member.start_time is None:
        return 0

    end = member.end_time or now or datetime.now(UTC)
    return _round_half_up((end - member.start_time).total_seconds())


def estimated_time_remaining(task: Task, now: datetime | None = None) -> int:
    """Linear estimate of the seconds a running task still needs.

    Returns 0 unless the task is running and has made some progress.
    """
    if task.status != MemberStatus.RUNNING or task.start_time is None:
        return 0

    progress = task_progress(task)
    if progress == 0:
        return 0

    elapsed = duration(task, now)
    estimated_total = elapsed / progress * 100
    return max(0, _round_half_up(estimated_total - elapsed))


def status_counts(group: Group) -> dict[MemberStatus, int]:
    """Number of members in each status (every status is present)."""
    counts = Counter(m.status for m in group.members)
    return {status: counts.get(status, 0) for status in MemberStatus}
