"""Tests for sequential workflow execution."""

import pytest

from pyorchestra import (
    Completed,
    ExecutionMode,
    Failed,
    GroupStatus,
    MemberStatus,
    Priority,
    Workflow,
    WorkflowEngine,
)

make_step = pytest.make_step


def sequential(*steps) -> Workflow:
    return Workflow(id="wf", name="wf", steps=list(steps), mode=ExecutionMode.SEQUENTIAL)


@pytest.mark.asyncio
async def test_runs_in_list_order(executor):
    workflow = sequential(make_step("a"), make_step("b"), make_step("c"))

    outcome = await WorkflowEngine(workflow, executor).run()

    assert isinstance(outcome, Completed)
    assert outcome.results == {"a": "a-done", "b": "b-done", "c": "c-done"}
    assert executor.calls == ["a", "b", "c"]
    assert executor.max_active == 1
    assert workflow.status == GroupStatus.COMPLETED
    assert workflow.progress == 100
    assert workflow.results == outcome.results


@pytest.mark.asyncio
async def test_list_order_wins_over_priority(executor):
    workflow = sequential(
        make_step("low", priority=Priority.LOW),
        make_step("urgent", priority=Priority.URGENT),
    )

    await WorkflowEngine(workflow, executor).run()

    assert executor.calls == ["low", "urgent"]


@pytest.mark.asyncio
async def test_failure_skips_the_rest(executor):
    workflow = sequential(make_step("a"), make_step("b"), make_step("c"))
    executor.fail("b")

    outcome = await WorkflowEngine(workflow, executor).run()

    assert isinstance(outcome, Failed)
    assert outcome.failed == ["b"]
    assert isinstance(outcome.errors["b"], RuntimeError)
    assert [s.status for s in workflow.steps] == [
        MemberStatus.COMPLETED,
        MemberStatus.FAILED,
        MemberStatus.SKIPPED,
    ]
    assert executor.call_count("c") == 0
    assert workflow.status == GroupStatus.FAILED


@pytest.mark.asyncio
async def test_dependency_outputs_reach_the_context(executor):
    workflow = sequential(make_step("a"), make_step("b", "a"), make_step("c"))
    executor.returns("a", {"rows": 3})

    await WorkflowEngine(workflow, executor).run()

    assert executor.contexts["a"] == {}
    assert executor.contexts["b"] == {"a": {"rows": 3}}
    assert executor.contexts["c"] == {}


@pytest.mark.asyncio
async def test_timestamps_and_current_step(executor):
    workflow = sequential(make_step("a"), make_step("b"))

    engine = WorkflowEngine(workflow, executor)
    await engine.run()

    for step in workflow.steps:
        assert step.start_time is not None
        assert step.end_time is not None
        assert step.end_time >= step.start_time
        assert step.duration is not None
    assert workflow.current_step == 1
    assert workflow.start_time is not None
    assert workflow.end_time is not None
    assert engine.trace == [["a"], ["b"]]
    assert engine.outputs == {"a": "a-done", "b": "b-done"}
    assert not engine.is_running


@pytest.mark.asyncio
async def test_empty_workflow_completes(executor):
    workflow = sequential()

    outcome = await WorkflowEngine(workflow, executor).run()

    assert outcome == Completed(results={})
    assert workflow.status == GroupStatus.COMPLETED
    assert workflow.progress == 0
