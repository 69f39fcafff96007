"""Tests for derived progress, durations and status counts."""

from datetime import UTC, datetime, timedelta

from pyorchestra.executor.progress import (
    duration,
    estimated_time_remaining,
    group_progress,
    member_progress,
    status_counts,
    task_progress,
)
from pyorchestra.models import (
    Command,
    MemberStatus,
    Step,
    StepStatus,
    Task,
    TaskQueue,
    Workflow,
)


def make_task(task_id: str, *statuses: StepStatus) -> Task:
    return Task(
        id=task_id,
        title=task_id,
        commands=[
            Command(id=f"{task_id}-{i}", name=f"cmd {i}", status=status)
            for i, status in enumerate(statuses)
        ],
    )


def test_task_progress_counts_completed_commands():
    task = make_task(
        "t",
        StepStatus.COMPLETED,
        StepStatus.COMPLETED,
        StepStatus.COMPLETED,
        StepStatus.PENDING,
    )

    assert task_progress(task) == 75
    assert task.progress == 75


def test_task_progress_rounds_half_up():
    # 5 of 8 = 62.5
    task = make_task("t", *([StepStatus.COMPLETED] * 5 + [StepStatus.PENDING] * 3))
    assert task_progress(task) == 63

    # 1 of 3 = 33.33
    task = make_task("t", StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.PENDING)
    assert task_progress(task) == 33


def test_task_without_commands_is_zero():
    task = Task(id="t", title="empty", status=MemberStatus.COMPLETED)

    assert task_progress(task) == 0


def test_step_progress_is_all_or_nothing():
    step = Step(id="s", name="s")
    assert member_progress(step) == 0

    step.status = MemberStatus.COMPLETED
    assert member_progress(step) == 100
    assert step.progress == 100


def test_queue_progress_is_mean_of_tasks():
    queue = TaskQueue(
        id="q",
        name="q",
        tasks=[
            make_task("half", StepStatus.COMPLETED, StepStatus.PENDING),
            make_task("done", StepStatus.COMPLETED),
        ],
    )

    assert group_progress(queue) == 75
    assert queue.progress == 75


def test_workflow_progress():
    steps = [Step(id=f"s{i}", name=f"s{i}") for i in range(3)]
    steps[0].status = MemberStatus.COMPLETED
    workflow = Workflow(id="w", name="w", steps=steps)

    # 100 / 3 = 33.33
    assert workflow.progress == 33


def test_empty_group_progress_is_zero():
    assert group_progress(Workflow(id="w", name="w")) == 0
    assert group_progress(TaskQueue(id="q", name="q")) == 0


def test_duration_uses_end_time():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    step = Step(id="s", name="s", start_time=start, end_time=start + timedelta(seconds=90.4))

    assert duration(step) == 90


def test_duration_of_running_member_uses_now():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    step = Step(id="s", name="s", start_time=start)

    assert duration(step, now=start + timedelta(seconds=12)) == 12


def test_duration_before_start_is_zero():
    assert duration(Step(id="s", name="s")) == 0


def test_estimated_time_remaining():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    task = make_task("t", StepStatus.COMPLETED, StepStatus.PENDING)
    task.status = MemberStatus.RUNNING
    task.start_time = start

    # 50% after 30s means about 30s left
    assert estimated_time_remaining(task, now=start + timedelta(seconds=30)) == 30


def test_estimated_time_remaining_without_progress():
    task = make_task("t", StepStatus.PENDING)
    task.status = MemberStatus.RUNNING
    task.start_time = datetime(2024, 1, 1, tzinfo=UTC)

    assert estimated_time_remaining(task) == 0


def test_estimated_time_remaining_not_running():
    task = make_task("t", StepStatus.COMPLETED)
    task.status = MemberStatus.COMPLETED

    assert estimated_time_remaining(task) == 0


def test_status_counts_include_every_status():
    steps = [Step(id=f"s{i}", name=f"s{i}") for i in range(3)]
    steps[0].status = MemberStatus.COMPLETED
    steps[1].status = MemberStatus.FAILED

    counts = status_counts(Workflow(id="w", name="w", steps=steps))

    assert counts[MemberStatus.COMPLETED] == 1
    assert counts[MemberStatus.FAILED] == 1
    assert counts[MemberStatus.PENDING] == 1
    assert counts[MemberStatus.SKIPPED] == 0
    assert set(counts) == set(MemberStatus)
