"""
WorkflowEngine - drives a workflow or task queue to completion.

One engine owns one group (Workflow or TaskQueue). It asks the scheduler
for runnable members, dispatches them to the host's StepExecutor as
independent asyncio tasks, applies the retry policy to failures, skips
members that can never run, and notifies observers after every mutation.

Execution modes:
- SEQUENTIAL: list order, one member at a time, a terminal failure aborts
  the rest of the sequence.
- PARALLEL: dispatch through the scheduler as slots free up; fail-fast by
  default (stop dispatching after the first terminal failure).
- CONDITIONAL: dependency-gated dispatch; members whose dependency failed
  are skipped and independent branches keep running.

Concurrency model:
A single coordinating loop per engine. Each pass skips blocked members,
selects and starts the next batch, then waits for the first in-flight
member to finish before re-checking free slots. Nothing else mutates the
group while the loop runs.

Usage:
    engine = (
        WorkflowEngine(workflow, executor, settings)
        .with_fail_fast(False)
        .with_observer(render)
    )
    outcome = await engine.run()
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pyorchestra.config import ExecutionSettings
from pyorchestra.executor.observer import Observer, SnapshotWriter, StateChange
from pyorchestra.executor.outcome import Completed, Failed, Rejected, RunOutcome, Stopped
from pyorchestra.executor.progress import member_progress
from pyorchestra.executor.protocol import StepContext, StepExecutor
from pyorchestra.executor.scheduler import (
    ConfigurationError,
    blocked_members,
    select_next,
    validate_members,
)
from pyorchestra.models import (
    ExecutionMode,
    Group,
    GroupStatus,
    Member,
    MemberStatus,
    StepStatus,
    Task,
    Workflow,
    is_retryable,
)
from pyorchestra.storage.base import StateStore

logger = logging.getLogger(__name__)

__all__ = ["WorkflowEngine"]


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class _Attempt:
    """Result of one dispatch, produced at the dispatch boundary."""

    member: Member
    value: Any = None
    error: Exception | None = None


class WorkflowEngine:
    """
    Executes one Workflow or TaskQueue.

    All mutation of the group during a run goes through this object. The
    engine is not reentrant: one run() at a time.

    Builder pattern allows fluent configuration:
        WorkflowEngine(group, executor).with_timeout(30).with_store(store)
    """

    def __init__(
        self,
        group: Group,
        executor: StepExecutor,
        settings: ExecutionSettings | None = None,
    ):
        """
        Initialize the engine.

        All dependencies passed explicitly, no globals.

        Args:
            group: Workflow or TaskQueue to drive (held by reference)
            executor: Host capability that runs one step or command
            settings: Execution settings (defaults to ExecutionSettings())
        """
        self._group = group
        self._executor = executor
        self._settings = settings or ExecutionSettings()

        self._fail_fast = self._settings.fail_fast
        self._timeout = self._settings.default_timeout
        self._observers: list[Observer] = []

        self._in_flight: dict[str, asyncio.Task[_Attempt]] = {}
        self._outputs: dict[str, Any] = {}
        self._trace: list[list[str]] = []

        self._running = False
        self._stopped = False
        self._cancelled = False
        self._halted = False

    def __repr__(self) -> str:
        return f"WorkflowEngine({type(self._group).__name__}={self._group.id!r}, mode={self.mode})"

    # ========================================================================
    # Builder configuration
    # ========================================================================

    def with_fail_fast(self, fail_fast: bool) -> "WorkflowEngine":
        """Choose the parallel-mode failure policy (builder pattern).

        True stops dispatching after the first terminal failure. False lets
        independent members keep running and skips dependents of failures.

        Returns:
            self for method chaining
        """
        self._fail_fast = fail_fast
        return self

    def with_timeout(self, timeout: float | None) -> "WorkflowEngine":
        """Set the per-call executor timeout in seconds, None to disable (builder pattern).

        Returns:
            self for method chaining
        """
        self._timeout = timeout
        return self

    def with_observer(self, observer: Observer) -> "WorkflowEngine":
        """Register a state change observer (builder pattern).

        The observer is called after every mutation with a StateChange. It
        may be a plain function or a coroutine function. Exceptions it
        raises are logged and ignored.

        Returns:
            self for method chaining
        """
        self._observers.append(observer)
        return self

    def with_store(self, store: StateStore) -> "WorkflowEngine":
        """Persist a snapshot of the group to ``store`` after every mutation (builder pattern).

        Returns:
            self for method chaining
        """
        return self.with_observer(SnapshotWriter(store))

    # ========================================================================
    # Read-only state
    # ========================================================================

    @property
    def group(self) -> Group:
        return self._group

    @property
    def settings(self) -> ExecutionSettings:
        return self._settings

    @property
    def mode(self) -> ExecutionMode:
        return self._group.mode

    @property
    def concurrency_limit(self) -> int:
        """Effective ceiling on in-flight members for this run."""
        if self.mode == ExecutionMode.SEQUENTIAL:
            return 1
        return min(self._group.concurrency, self._settings.max_concurrent_tasks)

    @property
    def outputs(self) -> dict[str, Any]:
        """Outputs of completed members, keyed by member id."""
        return dict(self._outputs)

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    @property
    def trace(self) -> list[list[str]]:
        """Member ids started by each scheduling pass that started something."""
        return [list(batch) for batch in self._trace]

    @property
    def is_running(self) -> bool:
        return self._running

    # ========================================================================
    # Operations
    # ========================================================================

    def validate(self) -> None:
        """
        Check the group's configuration without running it.

        Raises:
            ConfigurationError: On cycles, duplicate ids, bad concurrency
                or negative retry budgets
        """
        validate_members(self._group.members, self._group.concurrency)

    async def run(self) -> RunOutcome:
        """
        Run the group until every member is terminal or the run is stopped.

        A group left PAUSED by stop() resumes: paused members go back to
        PENDING and completed members keep their results.

        Returns:
            Completed, Failed, Stopped, or Rejected (configuration error;
            nothing was dispatched)

        Raises:
            RuntimeError: If this engine is already running
        """
        if self._running:
            raise RuntimeError(f"{self._group.id} is already running")

        self._running = True
        try:
            return await self._run()
        finally:
            self._running = False

    def stop(self) -> None:
        """
        Stop dispatching and pause the group.

        Members in flight become PAUSED. Their executor calls are allowed to
        finish, but the results are discarded. run() returns Stopped once
        those calls have drained; a later run() resumes the group.
        """
        if not self._running:
            logger.debug(f"stop() ignored for {self._group.id}: not running")
            return

        self._stopped = True
        self._group.status = GroupStatus.PAUSED

        for member in self._group.members:
            if member.status == MemberStatus.RUNNING:
                member.status = MemberStatus.PAUSED
                if isinstance(member, Task):
                    for command in member.commands:
                        if command.status == StepStatus.RUNNING:
                            command.status = StepStatus.PENDING

        logger.info(f"Stopping {self._group.id}: {len(self._in_flight)} member(s) in flight")

    def cancel(self) -> None:
        """
        Stop the run for good.

        Like stop(), but the group ends FAILED and every member that is not
        terminal ends SKIPPED.
        """
        if not self._running:
            logger.debug(f"cancel() ignored for {self._group.id}: not running")
            return

        self.stop()
        self._cancelled = True

    def retry_failed(self, member_ids: list[str] | None = None) -> list[str]:
        """
        Explicit retry dispatch: move failed members back to PENDING.

        Resets FAILED members (all of them, or only ``member_ids``) and every
        SKIPPED member, with a fresh retry budget. Completed members and
        completed commands are kept. The group returns to IDLE, ready for
        run().

        Args:
            member_ids: Failed members to reset, None for all

        Returns:
            Ids of the members that were reset, in insertion order

        Raises:
            RuntimeError: If the engine is running
            ValueError: If a given id is not a member of the group
        """
        if self._running:
            raise RuntimeError(f"Cannot retry members of {self._group.id} while it is running")

        members = self._group.members
        if member_ids is not None:
            known = {m.id for m in members}
            unknown = [mid for mid in member_ids if mid not in known]
            if unknown:
                raise ValueError(f"Unknown member id(s): {unknown}")
        targets = set(member_ids) if member_ids is not None else None

        reset: list[str] = []
        for member in members:
            failed = member.status == MemberStatus.FAILED and (
                targets is None or member.id in targets
            )
            if failed or member.status == MemberStatus.SKIPPED:
                self._reset_member(member)
                reset.append(member.id)

        self._group.status = GroupStatus.IDLE
        self._group.end_time = None
        self._group.error = None

        logger.info(f"Reset {len(reset)} member(s) of {self._group.id} for retry")
        return reset

    # ========================================================================
    # Run loop
    # ========================================================================

    async def _run(self) -> RunOutcome:
        group = self._group

        try:
            self.validate()
        except ConfigurationError as e:
            logger.error(f"Rejected run of {group.id}: {e}")
            group.status = GroupStatus.FAILED
            group.error = str(e)
            group.end_time = _now()
            await self._emit()
            return Rejected(e)

        self._stopped = False
        self._cancelled = False
        self._halted = False

        # Nothing is in flight between runs, so RUNNING here is a leftover
        for member in group.members:
            if member.status in (MemberStatus.PAUSED, MemberStatus.RUNNING):
                member.status = MemberStatus.PENDING
                if isinstance(member, Task):
                    for command in member.commands:
                        if command.status == StepStatus.RUNNING:
                            command.status = StepStatus.PENDING

        self._outputs = {
            m.id: m.result for m in group.members if m.status == MemberStatus.COMPLETED
        }

        group.status = GroupStatus.RUNNING
        group.error = None
        group.end_time = None
        if group.start_time is None:
            group.start_time = _now()

        logger.info(
            f"Running {group.id} in {self.mode} mode "
            f"({len(group.members)} members, concurrency {self.concurrency_limit})"
        )
        await self._emit()

        await self._drive()
        return await self._finish()

    async def _drive(self) -> None:
        while not self._stopped:
            if not self._halted:
                if self.mode != ExecutionMode.SEQUENTIAL:
                    await self._skip_blocked()
                    if self._stopped:
                        break

                batch = self._next_batch()
                if batch:
                    self._trace.append([m.id for m in batch])
                    logger.debug(f"{self._group.id}: starting {[m.id for m in batch]}")
                    for member in batch:
                        if self._stopped:
                            break
                        await self._start(member)

            if not self._in_flight:
                break

            done, _ = await asyncio.wait(
                self._in_flight.values(), return_when=asyncio.FIRST_COMPLETED
            )
            for handle in done:
                await self._settle(handle.result())

        if self._in_flight:
            # Let already-issued calls finish; _settle discards their results
            for attempt in await asyncio.gather(*self._in_flight.values()):
                await self._settle(attempt)

    def _next_batch(self) -> list[Member]:
        members = self._group.members

        if self.mode == ExecutionMode.SEQUENTIAL:
            if self._in_flight:
                return []
            for member in members:
                if member.status == MemberStatus.PENDING:
                    return [member]
                if member.status == MemberStatus.FAILED:
                    self._halted = True
                    return []
            return []

        return select_next(members, self._in_flight.keys(), self.concurrency_limit)

    async def _skip_blocked(self) -> None:
        """Skip pending members whose dependencies can never complete, to a fixpoint."""
        while blocked := blocked_members(self._group.members):
            for member in blocked:
                member.status = MemberStatus.SKIPPED
                member.end_time = _now()
                logger.info(f"Skipping {member.id}: a dependency failed or was skipped")
                await self._emit(member)

    async def _start(self, member: Member) -> None:
        if self._stopped:
            return

        member.status = MemberStatus.RUNNING
        member.error = None
        member.end_time = None
        if member.start_time is None:
            member.start_time = _now()

        if isinstance(self._group, Workflow):
            self._group.current_step = next(
                i for i, step in enumerate(self._group.steps) if step is member
            )

        await self._emit(member)
        if self._stopped:
            return

        self._in_flight[member.id] = asyncio.create_task(
            self._attempt(member), name=f"pyorchestra:{self._group.id}:{member.id}"
        )

    async def _settle(self, attempt: _Attempt) -> None:
        member = attempt.member
        self._in_flight.pop(member.id, None)

        if self._stopped:
            logger.debug(f"Discarding result of {member.id}: {self._group.id} was stopped")
            return

        if attempt.error is None:
            member.status = MemberStatus.COMPLETED
            member.result = attempt.value
            self._mark_ended(member)
            self._outputs[member.id] = attempt.value
            self._group.results[member.id] = attempt.value
            logger.debug(f"{member.id} completed")
        else:
            self._handle_failure(member, attempt.error)

        await self._emit(member)

    def _handle_failure(self, member: Member, error: Exception) -> None:
        can_retry = (
            self._settings.enable_auto_retry
            and is_retryable(error)
            and member.retry_count < member.max_retries
        )

        if can_retry:
            member.retry_count += 1
            member.status = MemberStatus.PENDING
            if isinstance(member, Task):
                for command in member.commands:
                    if command.status == StepStatus.FAILED:
                        command.status = StepStatus.PENDING
                        command.error = None
            logger.warning(
                f"{member.id} failed, retrying "
                f"({member.retry_count}/{member.max_retries}): {error}"
            )
            return

        member.status = MemberStatus.FAILED
        member.error = error
        self._mark_ended(member)
        logger.error(f"{member.id} failed after {member.retry_count} retries: {error}")

        if self._settings.pause_on_error:
            self.stop()
        elif self._aborts_on_failure():
            self._halted = True

    def _aborts_on_failure(self) -> bool:
        if self.mode == ExecutionMode.SEQUENTIAL:
            return True
        if self.mode == ExecutionMode.PARALLEL:
            return self._fail_fast
        return False

    async def _finish(self) -> RunOutcome:
        group = self._group

        if self._stopped and not self._cancelled:
            remaining = [m.id for m in group.members if not m.status.is_terminal]
            logger.info(f"{group.id} paused with {len(remaining)} member(s) remaining")
            await self._emit()
            return Stopped(pending=remaining)

        for member in group.members:
            if not member.status.is_terminal:
                member.status = MemberStatus.SKIPPED
                member.end_time = _now()
                await self._emit(member)

        failed = [m for m in group.members if m.status == MemberStatus.FAILED]
        group.end_time = _now()

        if failed or self._cancelled:
            group.status = GroupStatus.FAILED
            outcome: RunOutcome = Failed(
                failed=[m.id for m in failed], errors={m.id: m.error for m in failed}
            )
        else:
            group.status = GroupStatus.COMPLETED
            outcome = Completed(results=dict(self._outputs))

        logger.info(f"{group.id} finished: {group.status} (progress {group.progress}%)")
        await self._emit()
        return outcome

    # ========================================================================
    # Dispatch boundary
    # ========================================================================

    async def _attempt(self, member: Member) -> _Attempt:
        """Run one attempt of a member. Never raises an Exception."""
        context = self._context_for(member)
        try:
            if isinstance(member, Task):
                value = await self._run_commands(member, context)
            else:
                value = await self._call(member, context)
        except Exception as e:
            return _Attempt(member=member, error=e)
        return _Attempt(member=member, value=value)

    async def _run_commands(self, task: Task, context: StepContext) -> Any:
        local = dict(context)
        value = None

        for index, command in enumerate(task.commands):
            if command.status == StepStatus.COMPLETED:
                local[command.id] = command.result
                value = command.result
                continue
            if self._stopped:
                return None

            task.current_command = index
            command.status = StepStatus.RUNNING
            command.error = None
            started = _now()
            await self._emit(task)

            try:
                result = await self._call(command, local)
            except Exception as e:
                if not self._stopped:
                    command.status = StepStatus.FAILED
                    command.error = e
                    command.duration = (_now() - started).total_seconds()
                raise

            if self._stopped:
                return None

            command.status = StepStatus.COMPLETED
            command.result = result
            command.duration = (_now() - started).total_seconds()
            local[command.id] = result
            value = result
            await self._emit(task)

        return value

    async def _call(self, step: Any, context: StepContext) -> Any:
        if self._timeout is None:
            return await self._executor.execute(step, context)
        return await asyncio.wait_for(self._executor.execute(step, context), self._timeout)

    def _context_for(self, member: Member) -> StepContext:
        return {dep: self._outputs[dep] for dep in member.dependencies if dep in self._outputs}

    # ========================================================================
    # Helpers
    # ========================================================================

    def _mark_ended(self, member: Member) -> None:
        member.end_time = _now()
        if member.start_time is not None:
            member.duration = (member.end_time - member.start_time).total_seconds()

    def _reset_member(self, member: Member) -> None:
        member.status = MemberStatus.PENDING
        member.retry_count = 0
        member.result = None
        member.error = None
        member.end_time = None
        member.duration = None
        if isinstance(member, Task):
            for command in member.commands:
                if command.status in (StepStatus.FAILED, StepStatus.RUNNING):
                    command.status = StepStatus.PENDING
                    command.error = None

    async def _emit(self, member: Member | None = None) -> None:
        if not self._observers:
            return

        group = self._group
        change = StateChange(
            group_id=group.id,
            group_status=group.status,
            progress=group.progress,
            member_id=member.id if member is not None else None,
            member_status=member.status if member is not None else None,
            member_progress=member_progress(member) if member is not None else None,
            group=group,
        )

        for observer in self._observers:
            try:
                result = observer(change)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Observer {observer!r} failed for {group.id}: {e}")
