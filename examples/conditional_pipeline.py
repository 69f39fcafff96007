"""
Conditional Workflow: Dependency-Gated Pipeline

A small report pipeline where one branch fails and its dependents are
skipped while the independent branch keeps running.

```text
        ┌── parse_logs ───── summarize_logs ──┐
fetch ──┤                                     ├── publish
        └── scan_metrics ─────────────────────┘
```

``scan_metrics`` raises a permanent error, so ``publish`` is skipped, while
``summarize_logs`` still completes. Fixing the data and calling
``retry_failed()`` re-runs only what did not complete.

Run with:
```bash
PYTHONPATH=src python examples/conditional_pipeline.py
```
"""

import asyncio
import logging

from pyorchestra import (
    ExecutionMode,
    ExecutionSettings,
    FunctionExecutor,
    RetryableError,
    WorkflowEngine,
    create_step,
    create_workflow,
    level_graph,
)

logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")


class MetricsUnavailable(RetryableError):
    """Permanent failure: retrying will not help until the source is fixed."""

    def is_retryable(self) -> bool:
        return False


metrics_online = False


async def run_step(step, context):
    print(f"  -> {step.name} (inputs: {sorted(context)})")
    await asyncio.sleep(0.05)

    if step.action == "scan" and not metrics_online:
        raise MetricsUnavailable("metrics endpoint returned 503")

    return f"{step.name} output"


def render(change):
    if change.member_id is not None:
        print(f"     [{change.progress:3d}%] {change.member_id}: {change.member_status}")


async def main():
    global metrics_online

    steps = [
        create_step("fetch", "fetch", step_id="fetch"),
        create_step("parse_logs", "parse", step_id="parse_logs", dependencies=["fetch"]),
        create_step("scan_metrics", "scan", step_id="scan_metrics", dependencies=["fetch"]),
        create_step(
            "summarize_logs", "summarize", step_id="summarize_logs", dependencies=["parse_logs"]
        ),
        create_step(
            "publish",
            "publish",
            step_id="publish",
            dependencies=["summarize_logs", "scan_metrics"],
        ),
    ]
    workflow = create_workflow(
        "Nightly report", "Fetch, analyze, publish", steps, mode=ExecutionMode.CONDITIONAL
    )

    print(level_graph(workflow.steps))

    settings = ExecutionSettings.from_env()
    engine = WorkflowEngine(workflow, FunctionExecutor(run_step), settings).with_observer(render)

    print("First run:")
    outcome = await engine.run()
    print(f"  {outcome}, group {workflow.status}, progress {workflow.progress}%\n")

    metrics_online = True
    reset = engine.retry_failed()
    print(f"Retrying {reset}:")
    outcome = await engine.run()
    print(f"  {outcome}, group {workflow.status}, progress {workflow.progress}%")
    print(f"  Passes: {engine.trace}")


if __name__ == "__main__":
    asyncio.run(main())
