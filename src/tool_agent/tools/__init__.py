"""Tooling layer for schema-validated execution."""

from tool_agent.tools.base import Tool, ToolParameters, ToolProperty
from tool_agent.tools.database import DemoDatabase
from tool_agent.tools.registry import ToolRegistry, build_registry
from tool_agent.tools.web import FetchResponse, Fetcher, UrllibFetcher

__all__ = [
    "DemoDatabase",
    "FetchResponse",
    "Fetcher",
    "Tool",
    "ToolParameters",
    "ToolProperty",
    "ToolRegistry",
    "UrllibFetcher",
    "build_registry",
]
