"""LangGraph assembly of the model-call / tool-call loop."""

from __future__ import annotations

import json
import logging
from typing import Any

from langgraph.graph import END, StateGraph

from tool_agent.agent.llm import ChatModel, ToolCallRequest
from tool_agent.agent.state import AgentState
from tool_agent.storage.models import Task
from tool_agent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

MAX_ITERATIONS_ERROR = "Maximum iterations reached"
EMPTY_ANSWER = "Task completed"


def build_graph(
    *,
    model: ChatModel,
    registry: ToolRegistry,
    max_iterations: int = 10,
    max_tokens: int = 1000,
):
    async def call_model(state: AgentState) -> AgentState:
        iterations = state.get("iterations", 0) + 1
        messages = list(state.get("messages", []))
        response = await model.complete(
            messages=messages,
            tools=registry.function_schemas(),
            max_tokens=max_tokens,
        )
        messages.append(response.to_message())
        logger.info(
            "agent_loop event=model_response task_id=%s iteration=%d tool_calls=%d",
            state["task"].id,
            iterations,
            len(response.tool_calls),
        )
        return {
            "messages": messages,
            "iterations": iterations,
            "pending_calls": list(response.tool_calls),
            "final_text": response.content,
        }

    async def run_tools(state: AgentState) -> AgentState:
        task = state["task"]
        messages = list(state.get("messages", []))
        for call in state.get("pending_calls", []):
            reply = await _run_tool_call(task, registry, call)
            if reply is not None:
                messages.append(reply)
        return {"messages": messages, "pending_calls": []}

    def finalize(state: AgentState) -> AgentState:
        task = state["task"]
        text = state.get("final_text") or EMPTY_ANSWER
        task.add_step("final", text)
        task.complete(text)
        return {"final_text": text}

    def exhausted(state: AgentState) -> AgentState:
        task = state["task"]
        task.fail(MAX_ITERATIONS_ERROR)
        task.add_step("final", f"Error: {MAX_ITERATIONS_ERROR}")
        return {"final_text": None}

    def _after_model(state: AgentState) -> str:
        return "tools" if state.get("pending_calls") else "done"

    def _after_tools(state: AgentState) -> str:
        if state.get("iterations", 0) >= max_iterations:
            return "exhausted"
        return "continue"

    graph = StateGraph(AgentState)

    graph.add_node("call_model", call_model)
    graph.add_node("run_tools", run_tools)
    graph.add_node("finalize", finalize)
    graph.add_node("exhausted", exhausted)

    graph.set_entry_point("call_model")
    graph.add_conditional_edges(
        "call_model", _after_model, {"tools": "run_tools", "done": "finalize"}
    )
    graph.add_conditional_edges(
        "run_tools", _after_tools, {"continue": "call_model", "exhausted": "exhausted"}
    )
    graph.add_edge("finalize", END)
    graph.add_edge("exhausted", END)

    return graph.compile()


async def _run_tool_call(
    task: Task,
    registry: ToolRegistry,
    call: ToolCallRequest,
) -> dict[str, Any] | None:
    try:
        args = json.loads(call.arguments)
    except (ValueError, RecursionError) as exc:
        # The call is dropped without a step or a tool message.
        logger.warning(
            "agent_loop event=skip_tool_call task_id=%s tool=%s call_id=%s reason=%s",
            task.id,
            call.name,
            call.id,
            exc,
        )
        return None

    task.add_step("tool_call", f"Calling {call.name}", tool_name=call.name, tool_input=args)
    try:
        output: Any = await registry.execute_tool(call.name, args)
        content = f"Tool {call.name} completed"
    except Exception as exc:  # noqa: BLE001
        message = str(exc) or type(exc).__name__
        output = {"error": message}
        content = f"Tool {call.name} failed: {message}"
        logger.warning(
            "agent_loop event=tool_failed task_id=%s tool=%s reason=%s",
            task.id,
            call.name,
            message,
        )

    task.add_step("tool_result", content, tool_name=call.name, tool_output=output)
    return {
        "role": "tool",
        "tool_call_id": call.id,
        "content": json.dumps(output, default=str),
    }
