from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from tool_agent.agent.llm import AssistantMessage, ToolCallRequest
from tool_agent.config.settings import Settings
from tool_agent.tools.database import DemoDatabase
from tool_agent.tools.registry import ToolRegistry, build_registry
from tool_agent.tools.web import FetchResponse


def tool_call(name: str, args: dict[str, Any] | str, call_id: str = "call_1") -> ToolCallRequest:
    arguments = args if isinstance(args, str) else json.dumps(args)
    return ToolCallRequest(id=call_id, name=name, arguments=arguments)


def answer(text: str | None) -> AssistantMessage:
    return AssistantMessage(content=text)


def calls(*requests: ToolCallRequest) -> AssistantMessage:
    return AssistantMessage(content=None, tool_calls=list(requests))


class ScriptedChatModel:
    """Test double that replays canned assistant messages in order.

    A reply may be a callable receiving the conversation so far, which lets a
    test build the final answer from the tool output the loop fed back.
    """

    def __init__(self, replies: list[Any], *, repeat_last: bool = False) -> None:
        self.replies = list(replies)
        self.repeat_last = repeat_last
        self.requests: list[dict[str, Any]] = []

    async def complete(
        self,
        *,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        max_tokens: int,
    ) -> AssistantMessage:
        self.requests.append(
            {"messages": list(messages), "tools": tools, "max_tokens": max_tokens}
        )
        index = len(self.requests) - 1
        if index >= len(self.replies):
            if not self.repeat_last:
                raise AssertionError("ScriptedChatModel ran out of replies")
            index = len(self.replies) - 1
        reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(messages)
        return reply


class FakeFetcher:
    """Maps URL prefixes to canned responses and records every request."""

    def __init__(self, routes: dict[str, FetchResponse | Exception] | None = None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, dict[str, Any] | None]] = []
        self.max_bytes: list[int | None] = []

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        max_bytes: int | None = None,
    ) -> FetchResponse:
        self.calls.append((url, params))
        self.max_bytes.append(max_bytes)
        for prefix, response in self.routes.items():
            if url.startswith(prefix):
                if isinstance(response, Exception):
                    raise response
                return response
        raise OSError(f"no route for {url}")


def json_response(payload: Any, status: int = 200) -> FetchResponse:
    return FetchResponse(status=status, text=json.dumps(payload))


def tool_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [json.loads(message["content"]) for message in messages if message["role"] == "tool"]


@pytest.fixture
def sandbox(tmp_path: Path) -> Path:
    path = tmp_path / "sandbox"
    path.mkdir()
    return path


@pytest.fixture
def database(sandbox: Path):
    db = DemoDatabase(sandbox / "demo.db")
    db.migrate()
    yield db
    db.close()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def registry(sandbox: Path, database: DemoDatabase, fetcher: FakeFetcher) -> ToolRegistry:
    return build_registry(sandbox_dir=sandbox, database=database, fetcher=fetcher)


@pytest.fixture
def settings(sandbox: Path) -> Settings:
    return Settings(sandbox_dir=sandbox, llm_api_key="", worker_count=1)
