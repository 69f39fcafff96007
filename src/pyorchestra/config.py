"""
Execution settings shared by every engine a host creates.

Settings are passed explicitly to WorkflowEngine, never read from a
global. ``ExecutionSettings.from_env()`` is a convenience for deployments
that inject configuration through the environment:

    $ export PYORCHESTRA_MAX_CONCURRENT_TASKS=8
    $ export PYORCHESTRA_FAIL_FAST=false

    settings = ExecutionSettings.from_env()
    engine = WorkflowEngine(workflow, executor, settings)
"""

import logging
import os
from dataclasses import dataclass

__all__ = ["ExecutionSettings", "ENV_PREFIX"]

ENV_PREFIX = "PYORCHESTRA_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ExecutionSettings:
    """Host-wide execution settings.

    Attributes:
        max_concurrent_tasks: Ceiling on in-flight members for any group.
            The effective limit is min(group.concurrency, this value).
        default_timeout: Seconds a single executor call may take before it
            counts as a failure. None disables the timeout.
        enable_auto_retry: When False, the first failure is terminal.
        pause_on_error: When True, a terminal member failure stops the group
            (PAUSED) instead of continuing or aborting.
        fail_fast: Default failure policy for parallel mode.
        log_level: Level applied to the ``pyorchestra`` logger by
            apply_log_level().
    """

    max_concurrent_tasks: int = 3
    default_timeout: float | None = 300.0
    enable_auto_retry: bool = True
    pause_on_error: bool = False
    fail_fast: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_concurrent_tasks < 1:
            raise ValueError(
                f"max_concurrent_tasks must be >= 1, got {self.max_concurrent_tasks}"
            )
        if self.default_timeout is not None and self.default_timeout <= 0:
            raise ValueError(f"default_timeout must be positive, got {self.default_timeout}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ExecutionSettings":
        """
        Build settings from ``PYORCHESTRA_*`` environment variables.

        Unset variables keep their defaults.

        Args:
            environ: Mapping to read instead of os.environ (for tests)

        Raises:
            ValueError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def read(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value.strip() if value is not None else None

        def read_bool(name: str, default: bool) -> bool:
            value = read(name)
            if value is None:
                return default
            if value.lower() in _TRUE:
                return True
            if value.lower() in _FALSE:
                return False
            raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")

        max_concurrent = read("MAX_CONCURRENT_TASKS")
        timeout = read("DEFAULT_TIMEOUT")

        if timeout is None:
            default_timeout = defaults.default_timeout
        elif timeout.lower() in ("0", "none", ""):
            default_timeout = None
        else:
            default_timeout = float(timeout)

        return cls(
            max_concurrent_tasks=(
                int(max_concurrent) if max_concurrent else defaults.max_concurrent_tasks
            ),
            default_timeout=default_timeout,
            enable_auto_retry=read_bool("ENABLE_AUTO_RETRY", defaults.enable_auto_retry),
            pause_on_error=read_bool("PAUSE_ON_ERROR", defaults.pause_on_error),
            fail_fast=read_bool("FAIL_FAST", defaults.fail_fast),
            log_level=(read("LOG_LEVEL") or defaults.log_level).upper(),
        )

    def apply_log_level(self) -> None:
        """Set the level of the ``pyorchestra`` logger. Handlers are left to the host."""
        logging.getLogger("pyorchestra").setLevel(self.log_level.upper())
