"""Task and execution-step models shared by the orchestrator, storage, and API."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tool_agent.errors import InvalidTransitionError

TaskStatus = Literal["pending", "running", "completed", "failed"]
StepType = Literal["thinking", "tool_call", "tool_result", "final"]

_NEXT_STATUS: dict[str, frozenset[str]] = {
    "pending": frozenset({"running"}),
    "running": frozenset({"completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
}


def utc_now() -> datetime:
    return datetime.now(UTC)


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExecutionStep(WireModel):
    """One entry in a task's step log."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    timestamp: datetime = Field(default_factory=utc_now)
    kind: StepType = Field(alias="type")
    content: str
    tool_name: str | None = None
    tool_input: Any = None
    tool_output: Any = None


class Task(WireModel):
    """A prompt and everything that happened while executing it."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    prompt: str
    status: TaskStatus = "pending"
    result: Any = None
    error: str | None = None
    steps: list[ExecutionStep] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in {"completed", "failed"}

    def add_step(
        self,
        kind: StepType,
        content: str,
        *,
        tool_name: str | None = None,
        tool_input: Any = None,
        tool_output: Any = None,
    ) -> ExecutionStep:
        step = ExecutionStep(
            kind=kind,
            content=content,
            tool_name=tool_name,
            tool_input=tool_input,
            tool_output=tool_output,
        )
        self.steps.append(step)
        return step

    def mark_running(self) -> None:
        self._transition("running")

    def complete(self, result: Any) -> None:
        self._transition("completed")
        self.result = result
        self.error = None
        self.completed_at = utc_now()

    def fail(self, error: str) -> None:
        self._transition("failed")
        self.error = error
        self.result = None
        self.completed_at = utc_now()

    def _transition(self, target: TaskStatus) -> None:
        if target not in _NEXT_STATUS[self.status]:
            raise InvalidTransitionError(
                f"Task {self.id} cannot move from {self.status} to {target}"
            )
        self.status = target


class CreateTaskRequest(BaseModel):
    prompt: str = Field(min_length=1)


class CreateTaskResponse(WireModel):
    task_id: str
