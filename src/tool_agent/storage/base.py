"""Storage interface for task records."""

from __future__ import annotations

from typing import Protocol

from tool_agent.storage.models import Task


class TaskStorage(Protocol):
    def create_task(self, prompt: str) -> Task: ...

    def get_task(self, task_id: str) -> Task | None: ...

    def list_tasks(self) -> list[Task]: ...
