"""Sandboxed file tools.

Every filename is reduced to its base name before use, so ``../../etc/passwd``
is read as ``passwd`` inside the sandbox rather than rejected.
"""

from __future__ import annotations

import asyncio
from pathlib import Path, PureWindowsPath
from typing import Any

from tool_agent.tools.base import Tool, ToolParameters, ToolResult, failure, string_params


def sandbox_path(sandbox_dir: Path, filename: str) -> Path:
    # PureWindowsPath splits on both separators.
    name = PureWindowsPath(filename).name
    if name in {"", ".", ".."}:
        raise ValueError(f"Invalid filename: {filename!r}")
    return sandbox_dir / name


def build_filesystem_tools(sandbox_dir: Path) -> list[Tool]:
    root = Path(sandbox_dir)

    async def read_file(params: dict[str, Any]) -> ToolResult:
        try:
            path = sandbox_path(root, params["filename"])
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, ValueError) as exc:
            return failure(_describe(exc))
        return {"success": True, "content": content}

    async def write_file(params: dict[str, Any]) -> ToolResult:
        try:
            path = sandbox_path(root, params["filename"])
            await asyncio.to_thread(_write_text, path, params["content"])
        except (OSError, ValueError) as exc:
            return failure(_describe(exc))
        return {"success": True, "path": str(path)}

    async def list_files(_: dict[str, Any]) -> ToolResult:
        try:
            files = await asyncio.to_thread(_list_names, root)
        except OSError as exc:
            return failure(_describe(exc))
        return {"success": True, "files": files}

    return [
        Tool(
            name="read_file",
            description="Read contents of a file from the sandbox directory",
            parameters=string_params(
                filename="Name of the file to read (must be in sandbox directory)"
            ),
            execute=read_file,
        ),
        Tool(
            name="write_file",
            description="Write content to a file in the sandbox directory",
            parameters=string_params(
                filename="Name of the file to write",
                content="Content to write to the file",
            ),
            execute=write_file,
        ),
        Tool(
            name="list_files",
            description="List all files in the sandbox directory",
            parameters=ToolParameters(),
            execute=list_files,
        ),
    ]


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _list_names(root: Path) -> list[str]:
    root.mkdir(parents=True, exist_ok=True)
    return sorted(entry.name for entry in root.iterdir())


def _describe(exc: Exception) -> str:
    if isinstance(exc, FileNotFoundError):
        return f"File not found: {Path(exc.filename).name if exc.filename else 'unknown'}"
    return str(exc)
