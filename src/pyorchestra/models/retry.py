"""
Retry policy configuration for member execution.

Design Pattern: Strategy Pattern
RetryPolicy encapsulates how many times a member may be re-run, so the
factories can stamp ``max_retries`` on new members without the engine
knowing where the number came from.

The engine itself never sleeps between retries: a failed member re-enters
the eligible pool immediately. ``delay_for_retry()`` exists for hosts that
want to layer a delay before resubmitting work.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, cast


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for member retry behavior.

    Examples:
        # Named policy: the defaults used by the factories
        policy = RetryPolicy.STANDARD

        # Simple: just specify the retry budget
        policy = RetryPolicy.with_max_retries(4)

        # Custom policy: full control, including host-side backoff
        policy = RetryPolicy(
            max_retries=5,
            initial_delay_ms=500,
            max_delay_ms=30000,
            backoff_multiplier=2.0,
        )
    """

    max_retries: int
    """Number of re-runs allowed after the first attempt.

    For example, max_retries = 2 means a member may run three times in
    total before it is terminally failed.
    """

    initial_delay_ms: int = 0
    """Suggested delay before the first retry in milliseconds."""

    max_delay_ms: int = 0
    """Cap for the suggested delay in milliseconds."""

    backoff_multiplier: float = 1.0
    """Multiplier applied to the delay for every further retry."""

    if TYPE_CHECKING:
        NONE: RetryPolicy
        STANDARD: RetryPolicy
        AGGRESSIVE: RetryPolicy
    else:
        NONE = cast("RetryPolicy", None)
        STANDARD = cast("RetryPolicy", None)
        AGGRESSIVE = cast("RetryPolicy", None)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")

    @classmethod
    def with_max_retries(cls, max_retries: int) -> RetryPolicy:
        """
        Create a policy with a custom retry budget and no suggested delay.

        Args:
            max_retries: Number of re-runs allowed after the first attempt

        Returns:
            RetryPolicy without backoff
        """
        return cls(max_retries=max_retries)

    def delay_for_retry(self, attempt: int) -> int | None:
        """
        Calculate the suggested delay before retry number ``attempt``.

        Uses exponential backoff: initial_delay * backoff_multiplier^(attempt-1)
        capped at max_delay.

        Args:
            attempt: The retry number (1-indexed)

        Returns:
            Delay in milliseconds, or None if the retry budget is exhausted.

        Example:
            policy = RetryPolicy(max_retries=2, initial_delay_ms=100,
                                 max_delay_ms=1000, backoff_multiplier=3.0)
            policy.delay_for_retry(1)  # 100
            policy.delay_for_retry(2)  # 300
            policy.delay_for_retry(3)  # None
        """
        if attempt < 1 or attempt > self.max_retries:
            return None

        delay_ms = self.initial_delay_ms * self.backoff_multiplier ** (attempt - 1)
        return int(min(delay_ms, self.max_delay_ms))


RetryPolicy.NONE = RetryPolicy(max_retries=0)

RetryPolicy.STANDARD = RetryPolicy(
    max_retries=2,
    initial_delay_ms=1000,  # 1 second
    max_delay_ms=30000,  # 30 seconds
    backoff_multiplier=2.0,
)

RetryPolicy.AGGRESSIVE = RetryPolicy(
    max_retries=5,
    initial_delay_ms=100,  # 100 milliseconds
    max_delay_ms=10000,  # 10 seconds
    backoff_multiplier=1.5,
)


# =============================================================================
# RetryableError - Fine-grained error retry control
# =============================================================================


class RetryableError(Exception):
    """
    Base class for failures that decide whether they should be retried.

    Step executors raise this (or a subclass) to short-circuit the retry
    budget for permanent failures.

    Example:
        class ScanError(RetryableError):
            def __init__(self, message: str, is_retryable: bool = True):
                super().__init__(message)
                self._retryable = is_retryable

            def is_retryable(self) -> bool:
                return self._retryable

        # Transient - the member goes back to PENDING
        raise ScanError("Share temporarily unavailable", is_retryable=True)

        # Permanent - the member fails immediately
        raise ScanError("Path does not exist", is_retryable=False)
    """

    def is_retryable(self) -> bool:
        """
        Returns True if this failure is transient.

        Returns:
            True if retryable, False if permanent
        """
        return True


def is_retryable(error: BaseException) -> bool:
    """Check whether an arbitrary failure may be retried.

    Only a RetryableError can opt out; every other exception is retryable.
    """
    if isinstance(error, RetryableError):
        return error.is_retryable()
    return True
