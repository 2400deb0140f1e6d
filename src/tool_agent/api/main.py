"""FastAPI app entrypoint for tool-agent."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from tool_agent.agent.llm import ChatModel, OpenAICompatibleChatModel
from tool_agent.agent.orchestrator import AgentOrchestrator
from tool_agent.api.runner import TaskRunner
from tool_agent.config.settings import Settings, get_settings
from tool_agent.errors import QueueFullError
from tool_agent.storage.base import TaskStorage
from tool_agent.storage.memory import InMemoryTaskStorage
from tool_agent.storage.models import CreateTaskRequest, CreateTaskResponse
from tool_agent.tools.database import DemoDatabase
from tool_agent.tools.registry import build_registry
from tool_agent.tools.web import Fetcher, UrllibFetcher

logger = logging.getLogger(__name__)


def build_chat_model(settings: Settings) -> ChatModel:
    return OpenAICompatibleChatModel(
        api_key=settings.resolved_llm_api_key(),
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        timeout_s=settings.llm_timeout_s,
        max_retries=settings.llm_max_retries,
        backoff_s=settings.llm_backoff_s,
    )


def create_app(
    *,
    settings_override: Settings | None = None,
    storage: TaskStorage | None = None,
    model: ChatModel | None = None,
    fetcher: Fetcher | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    database = DemoDatabase(settings.resolved_database_path())
    registry = build_registry(
        sandbox_dir=settings.sandbox_dir,
        database=database,
        fetcher=fetcher or UrllibFetcher(timeout_s=settings.http_timeout_s),
        tool_timeout_s=settings.tool_timeout_s,
        http_max_chars=settings.http_max_chars,
    )
    orchestrator = AgentOrchestrator(
        model=model or build_chat_model(settings),
        registry=registry,
        max_iterations=settings.max_iterations,
        max_tokens=settings.llm_max_tokens,
    )
    runner = TaskRunner(
        orchestrator,
        worker_count=settings.worker_count,
        queue_maxsize=settings.queue_maxsize,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.sandbox_dir.mkdir(parents=True, exist_ok=True)
        database.migrate()
        await runner.start()
        try:
            yield
        finally:
            await runner.stop()
            database.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage or InMemoryTaskStorage()
    app.state.registry = registry
    app.state.orchestrator = orchestrator
    app.state.runner = runner

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.get("/tools")
    def tools(request: Request) -> dict[str, list[str]]:
        return {"tools": request.app.state.registry.names()}

    @app.post("/tasks", response_model=CreateTaskResponse)
    async def create_task(payload: CreateTaskRequest, request: Request) -> Any:
        task_runner: TaskRunner = request.app.state.runner
        if not task_runner.running:
            await task_runner.start()

        task = request.app.state.storage.create_task(payload.prompt)
        try:
            task_runner.submit(task)
        except QueueFullError as exc:
            task.mark_running()
            task.fail(str(exc))
            return JSONResponse(status_code=503, content={"error": str(exc)})

        logger.info("task_api event=created task_id=%s", task.id)
        return CreateTaskResponse(task_id=task.id)

    # The event loop thread owns task mutation, so reads stay on it too.
    @app.get("/tasks")
    async def get_tasks(
        request: Request,
        task_id: str | None = Query(default=None, alias="id"),
    ) -> Any:
        task_storage: TaskStorage = request.app.state.storage
        if task_id is not None:
            task = task_storage.get_task(task_id)
            if task is None:
                return JSONResponse(status_code=404, content={"error": "Task not found"})
            return task.model_dump(mode="json", by_alias=True)
        return [task.model_dump(mode="json", by_alias=True) for task in task_storage.list_tasks()]

    return app


app = create_app()
