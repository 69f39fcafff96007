"""Priority ordinals for members and groups."""

from enum import Enum


class Priority(Enum):
    """Priority of a schedulable member.

    The scheduler orders eligible members by ``weight`` descending:
    urgent > high > medium > low.
    """

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return _MEMBER_WEIGHTS[self]

    def __str__(self) -> str:
        return self.value


class QueuePriority(Enum):
    """Priority of a whole workflow or queue, for hosts running several."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        return _QUEUE_WEIGHTS[self]

    def __str__(self) -> str:
        return self.value


_MEMBER_WEIGHTS = {
    Priority.URGENT: 4,
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}

_QUEUE_WEIGHTS = {
    QueuePriority.HIGH: 3,
    QueuePriority.MEDIUM: 2,
    QueuePriority.LOW: 1,
}
