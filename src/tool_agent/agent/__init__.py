"""Agent loop: chat model adapter, graph, and orchestrator."""

from tool_agent.agent.llm import (
    AssistantMessage,
    ChatModel,
    OpenAICompatibleChatModel,
    ToolCallRequest,
)
from tool_agent.agent.orchestrator import AgentOrchestrator

__all__ = [
    "AgentOrchestrator",
    "AssistantMessage",
    "ChatModel",
    "OpenAICompatibleChatModel",
    "ToolCallRequest",
]
