"""Core data models for workflow and queue execution.

Defines types for member state tracking, priorities, grouping and retry
behavior.

Design: Dependency-Free Models
These types only import each other at module level. Derived properties
(``progress``) reach the aggregator lazily, so importing the models never
pulls in the executor.
"""

from pyorchestra.models.group import Group, Member, TaskQueue, Workflow
from pyorchestra.models.priority import Priority, QueuePriority
from pyorchestra.models.retry import RetryableError, RetryPolicy, is_retryable
from pyorchestra.models.status import ExecutionMode, GroupStatus, MemberStatus, StepStatus
from pyorchestra.models.step import Command, Step
from pyorchestra.models.task import Task

__all__ = [
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
]
