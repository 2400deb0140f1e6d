"""In-memory task store; records live for the lifetime of the process."""

from __future__ import annotations

from tool_agent.storage.models import Task


class InMemoryTaskStorage:
    """Dict-backed store that hands out the live Task objects.

    The orchestrator mutates the returned Task in place, so callers polling the
    store observe progress without an explicit update call.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def create_task(self, prompt: str) -> Task:
        task = Task(prompt=prompt)
        self._tasks[task.id] = task
        return task

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def list_tasks(self) -> list[Task]:
        return list(self._tasks.values())
