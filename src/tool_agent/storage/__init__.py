"""Storage backends and models."""

from tool_agent.storage.base import TaskStorage
from tool_agent.storage.memory import InMemoryTaskStorage
from tool_agent.storage.models import ExecutionStep, Task

__all__ = [
    "ExecutionStep",
    "InMemoryTaskStorage",
    "Task",
    "TaskStorage",
]
