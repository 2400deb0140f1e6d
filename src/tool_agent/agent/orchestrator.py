"""Agent orchestrator: runs one task through the bounded tool-calling loop."""

from __future__ import annotations

import logging

from tool_agent.agent.llm import ChatModel
from tool_agent.agent.state import initial_state
from tool_agent.agent.workflow import build_graph
from tool_agent.storage.models import Task
from tool_agent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class AgentOrchestrator:
    """Drive a task from ``pending`` to ``completed`` or ``failed``.

    Tool failures are fed back to the model and never end the loop. A failing
    model call, or running out of iterations, fails the task.
    """

    def __init__(
        self,
        *,
        model: ChatModel,
        registry: ToolRegistry,
        max_iterations: int = 10,
        max_tokens: int = 1000,
    ) -> None:
        self.model = model
        self.registry = registry
        self.max_iterations = max_iterations
        self.workflow = build_graph(
            model=model,
            registry=registry,
            max_iterations=max_iterations,
            max_tokens=max_tokens,
        )

    async def execute_task(self, task: Task) -> Task:
        task.mark_running()
        logger.info("task_run event=start task_id=%s status=%s", task.id, task.status)

        try:
            await self.workflow.ainvoke(
                initial_state(task),
                config={"recursion_limit": self.max_iterations * 2 + 5},
            )
        except Exception as exc:  # noqa: BLE001
            message = str(exc) or type(exc).__name__
            logger.warning("task_run event=error task_id=%s reason=%s", task.id, message)
            if not task.is_terminal:
                task.fail(message)
                task.add_step("final", f"Error: {message}")

        logger.info(
            "task_run event=finished task_id=%s status=%s steps=%d",
            task.id,
            task.status,
            len(task.steps),
        )
        return task
