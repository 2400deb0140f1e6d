"""Typed state contract for the agent loop graph."""

from typing import Any, TypedDict

from tool_agent.agent.llm import ToolCallRequest
from tool_agent.agent.prompts import SYSTEM_PROMPT
from tool_agent.storage.models import Task


class AgentState(TypedDict, total=False):
    task: Task
    messages: list[dict[str, Any]]
    iterations: int
    pending_calls: list[ToolCallRequest]
    final_text: str | None


def initial_state(task: Task, system_prompt: str = SYSTEM_PROMPT) -> AgentState:
    return {
        "task": task,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": task.prompt},
        ],
        "iterations": 0,
        "pending_calls": [],
        "final_text": None,
    }
