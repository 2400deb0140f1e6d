"""Exception types shared across the tool registry, orchestrator, and API."""

from __future__ import annotations


class ToolAgentError(Exception):
    """Base class for tool-agent failures."""


class ToolNotFoundError(ToolAgentError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Tool not found: {name}")
        self.name = name


class ToolTimeoutError(ToolAgentError):
    def __init__(self, name: str, timeout_s: float) -> None:
        super().__init__(f"Tool '{name}' timed out after {timeout_s:.2f}s")
        self.name = name
        self.timeout_s = timeout_s


class InvalidTransitionError(ToolAgentError):
    """Raised when a task status would move backwards or repeat a terminal move."""


class ModelResponseError(ToolAgentError):
    """Raised when the chat model returns a payload the loop cannot use."""


class QueueFullError(ToolAgentError):
    """Raised when the task runner cannot accept more work."""
