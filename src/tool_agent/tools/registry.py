"""Tool registry: name-keyed dispatch with schema validation and a per-call timeout."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any

from tool_agent.errors import ToolNotFoundError, ToolTimeoutError
from tool_agent.tools.base import Tool, ToolResult, failure
from tool_agent.tools.database import DemoDatabase, build_database_tool
from tool_agent.tools.filesystem import build_filesystem_tools
from tool_agent.tools.web import Fetcher, UrllibFetcher, build_http_get_tool, build_weather_tool

logger = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT_S = 30.0


class ToolRegistry:
    """Holds the available tools and executes them by name."""

    def __init__(
        self,
        tools: list[Tool] | None = None,
        *,
        tool_timeout_s: float = DEFAULT_TOOL_TIMEOUT_S,
    ) -> None:
        self._tools: dict[str, Tool] = {}
        self.tool_timeout_s = tool_timeout_s
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def get_all(self) -> list[Tool]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return sorted(self._tools)

    def function_schemas(self) -> list[dict[str, Any]]:
        return [tool.function_schema() for tool in self._tools.values()]

    async def execute_tool(self, name: str, params: Any) -> ToolResult:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)

        problem = tool.parameters.validate_params(params)
        if problem is not None:
            return failure(f"Validation failed: {problem}")

        started_at = time.perf_counter()
        deadline = asyncio.timeout(self.tool_timeout_s)
        try:
            async with deadline:
                result = await tool.execute(params)
        except TimeoutError as exc:
            # A TimeoutError raised by the tool itself is not ours to rename.
            if not deadline.expired():
                raise
            logger.warning(
                "tool_call event=timeout tool=%s timeout_s=%s", name, self.tool_timeout_s
            )
            raise ToolTimeoutError(name, self.tool_timeout_s) from exc

        logger.info(
            "tool_call event=completed tool=%s success=%s duration_ms=%s",
            name,
            result.get("success") if isinstance(result, dict) else None,
            _duration_ms(started_at),
        )
        return result


def build_registry(
    *,
    sandbox_dir: Path,
    database: DemoDatabase,
    fetcher: Fetcher | None = None,
    tool_timeout_s: float = DEFAULT_TOOL_TIMEOUT_S,
    http_max_chars: int = 1000,
) -> ToolRegistry:
    web_fetcher = fetcher or UrllibFetcher()
    tools = [
        *build_filesystem_tools(sandbox_dir),
        build_database_tool(database),
        build_weather_tool(web_fetcher),
        build_http_get_tool(web_fetcher, max_chars=http_max_chars),
    ]
    return ToolRegistry(tools, tool_timeout_s=tool_timeout_s)


def _duration_ms(started_at: float) -> float:
    return round((time.perf_counter() - started_at) * 1000.0, 2)
