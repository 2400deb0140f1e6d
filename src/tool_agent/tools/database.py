"""Read-only query tool over a seeded SQLite demo database.

The keyword check below is a substring blocklist, not a SQL parser. It can be
bypassed with encoding or whitespace tricks and should be treated as advisory.
"""

from __future__ import annotations

import asyncio
import sqlite3
import threading
from pathlib import Path
from typing import Any

from tool_agent.tools.base import Tool, ToolResult, failure, string_params

MAX_QUERY_CHARS = 500
DANGEROUS_KEYWORDS = (
    "DROP",
    "DELETE",
    "INSERT",
    "UPDATE",
    "ALTER",
    "CREATE",
    "TRUNCATE",
    "EXEC",
    "EXECUTE",
    "--",
    ";--",
    "/*",
    "*/",
    "UNION",
)
SEED_USERS = (
    ("Alice Johnson", "alice@example.com", "Engineering"),
    ("Bob Smith", "bob@example.com", "Sales"),
    ("Carol Davis", "carol@example.com", "Engineering"),
    ("David Brown", "david@example.com", "Marketing"),
)


class DemoDatabase:
    """Thread-safe SQLite handle shared by all query tool invocations."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    def migrate(self) -> None:
        """Create the users table and seed it when empty."""
        with self._lock:
            conn = self._connect()
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL,
                    department TEXT
                )
                """)
            (count,) = conn.execute("SELECT COUNT(*) FROM users").fetchone()
            if count == 0:
                conn.executemany(
                    "INSERT INTO users (name, email, department) VALUES (?, ?, ?)",
                    SEED_USERS,
                )
            conn.commit()

    def query(self, sql: str) -> list[dict[str, Any]]:
        if self._conn is None:
            self.migrate()
        with self._lock:
            rows = self._connect().execute(sql).fetchall()
        return [
            {key: _json_safe(value) for key, value in zip(row.keys(), row)} for row in rows
        ]

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._conn = conn
        return self._conn


def _json_safe(value: Any) -> Any:
    # BLOB columns come back as bytes.
    if isinstance(value, bytes):
        return value.hex()
    return value


def check_query(query: str) -> str | None:
    """Return the reason ``query`` is refused, or None when it may run."""
    if len(query) > MAX_QUERY_CHARS:
        return f"Query too long (max {MAX_QUERY_CHARS} characters)"
    normalized = query.upper()
    if not normalized.startswith("SELECT"):
        return "Only SELECT queries are allowed"
    for keyword in DANGEROUS_KEYWORDS:
        if keyword in normalized:
            return f"Blocked dangerous keyword: {keyword}"
    return None


def build_database_tool(database: DemoDatabase) -> Tool:
    async def query_database(params: dict[str, Any]) -> ToolResult:
        query = params["query"].strip()
        refusal = check_query(query)
        if refusal is not None:
            return failure(refusal)
        try:
            results = await asyncio.to_thread(database.query, query)
        except sqlite3.Error as exc:
            return failure(str(exc))
        return {"success": True, "results": results, "count": len(results)}

    return Tool(
        name="query_database",
        description=(
            "Execute a SELECT query on the database. Only SELECT queries are allowed "
            "for safety. Table: users(id, name, email, department)."
        ),
        parameters=string_params(query="SQL SELECT query to execute"),
        execute=query_database,
    )
