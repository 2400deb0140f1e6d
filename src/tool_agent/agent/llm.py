from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol
from urllib import error, request

from pydantic import BaseModel, Field

from tool_agent.errors import ModelResponseError

logger = logging.getLogger(__name__)


class ToolCallRequest(BaseModel):
    """One tool invocation requested by the model."""

    id: str
    name: str
    # Raw JSON text exactly as the model produced it.
    arguments: str = ""


class AssistantMessage(BaseModel):
    content: str | None = None
    tool_calls: list[ToolCallRequest] = Field(default_factory=list)

    def to_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        return message


class ChatModel(Protocol):
    """Interface for tool-calling chat completions."""

    async def complete(
        self,
        *,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        max_tokens: int,
    ) -> AssistantMessage: ...


class OpenAICompatibleChatModel:
    """Chat completions client for OpenAI-compatible REST endpoints (Groq by default)."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "openai/gpt-oss-120b",
        base_url: str = "https://api.groq.com/openai/v1",
        timeout_s: float = 60.0,
        max_retries: int = 1,
        backoff_s: float = 0.5,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.max_retries = max(0, max_retries)
        self.backoff_s = max(0.0, backoff_s)

    async def complete(
        self,
        *,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        max_tokens: int,
    ) -> AssistantMessage:
        if not self.api_key:
            raise ModelResponseError("LLM API key is missing. Set TOOL_AGENT_LLM_API_KEY.")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        response_json = await self._request_with_retry(payload)
        return parse_assistant_message(response_json)

    async def _request_with_retry(self, payload: dict[str, Any]) -> dict[str, Any]:
        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            try:
                return await asyncio.to_thread(self._request, payload)
            except (TimeoutError, ValueError, error.URLError) as exc:
                last_error = exc
                logger.warning(
                    "LLM request failed attempt=%d/%d model=%s reason=%s",
                    attempt + 1,
                    self.max_retries + 1,
                    self.model,
                    exc,
                )
                if attempt < self.max_retries and self.backoff_s > 0:
                    await asyncio.sleep(self.backoff_s)
        if last_error is None:
            raise RuntimeError("LLM request failed with unknown error")
        raise last_error

    def _request(self, payload: dict[str, Any]) -> dict[str, Any]:
        req = request.Request(
            url=f"{self.base_url}/chat/completions",
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        try:
            with request.urlopen(req, timeout=self.timeout_s) as response:
                body = response.read().decode("utf-8")
        except error.HTTPError as exc:
            message = exc.read().decode("utf-8", errors="replace")
            raise ModelResponseError(
                f"LLM request failed with status {exc.code}: {message[:400]}"
            ) from exc
        return json.loads(body)


def parse_assistant_message(response_json: dict[str, Any]) -> AssistantMessage:
    choices = response_json.get("choices") or []
    if not choices:
        raise ModelResponseError("LLM response did not contain choices")

    message = choices[0].get("message")
    if not isinstance(message, dict):
        raise ModelResponseError("LLM response choice has no message")

    calls: list[ToolCallRequest] = []
    for raw_call in message.get("tool_calls") or []:
        function = raw_call.get("function") or {}
        arguments = function.get("arguments")
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments) if arguments is not None else ""
        calls.append(
            ToolCallRequest(
                id=str(raw_call.get("id", "")),
                name=str(function.get("name", "")),
                arguments=arguments,
            )
        )

    content = message.get("content")
    return AssistantMessage(
        content=content if isinstance(content, str) else None,
        tool_calls=calls,
    )
