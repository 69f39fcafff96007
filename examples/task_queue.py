"""
Task Queue: Prioritized Tasks With Ordered Commands

Three development tasks, each made of commands, run two at a time. The
urgent task goes first, and the "deploy" task waits for "api". One command
fails once and is retried, resuming from the failed command.

Progress is rendered from StateChange notifications, and the latest
snapshot of the queue is persisted to SQLite after every change.

Run with:
```bash
PYTHONPATH=src python examples/task_queue.py
```
"""

import asyncio
import logging

from pyorchestra import (
    Priority,
    WorkflowEngine,
    create_queue,
    create_task,
    load_snapshot,
    status_counts,
)
from pyorchestra.storage.sqlite import SqliteStateStore

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

attempts: dict[str, int] = {}


class CommandRunner:
    """Pretends to run shell commands; 'run migrations' fails on its first attempt."""

    async def execute(self, command, context):
        attempts[command.id] = attempts.get(command.id, 0) + 1
        await asyncio.sleep(command.estimated_time / 100)

        if command.name == "run migrations" and attempts[command.id] == 1:
            raise ConnectionError("database not ready")

        return f"{command.name}: ok"


async def main():
    api = create_task(
        "API endpoints",
        "Build the REST layer",
        [
            {"name": "write handlers", "estimated_time": 5},
            {"name": "run migrations", "estimated_time": 3},
            {"name": "integration tests", "estimated_time": 4},
        ],
        priority=Priority.HIGH,
        component="Backend",
    )
    hotfix = create_task(
        "Hotfix login",
        "Fix the session timeout bug",
        [{"name": "patch", "estimated_time": 2}, {"name": "verify", "estimated_time": 2}],
        priority=Priority.URGENT,
        component="Frontend",
    )
    deploy = create_task(
        "Deploy",
        "Ship to staging",
        [{"name": "build image", "estimated_time": 4}, {"name": "rollout", "estimated_time": 3}],
        dependencies=[api.id],
        component="Infrastructure",
    )
    queue = create_queue("Sprint 12", "Backend and ops work", [api, hotfix, deploy])

    store = await SqliteStateStore.in_memory()
    try:
        engine = (
            WorkflowEngine(queue, CommandRunner())
            .with_observer(
                lambda change: print(f"  queue {change.progress:3d}%")
                if change.member_id is None
                else None
            )
            .with_store(store)
        )
        outcome = await engine.run()

        print(f"\n{outcome}")
        for task in queue.tasks:
            print(f"  {task.title:<15} {task.status!s:<10} retries={task.retry_count}")
        print(f"  counts: { {str(k): v for k, v in status_counts(queue).items() if v} }")

        snapshot = await load_snapshot(store, queue.id)
        print(f"  snapshot status: {snapshot.status}, progress {snapshot.progress}%")
    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
