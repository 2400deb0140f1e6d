"""Application settings."""

from functools import lru_cache
import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "tool-agent"
    app_env: str = "dev"
    log_level: str = "INFO"
    max_iterations: int = Field(default=10, ge=1)
    tool_timeout_s: float = Field(default=30.0, gt=0.0)
    llm_model: str = "openai/gpt-oss-120b"
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_api_key: str = ""
    llm_max_tokens: int = Field(default=1000, ge=1)
    llm_timeout_s: float = Field(default=60.0, ge=0.5)
    llm_max_retries: int = Field(default=1, ge=0)
    llm_backoff_s: float = Field(default=0.5, ge=0.0)
    sandbox_dir: Path = PROJECT_ROOT / "sandbox"
    database_path: Path | None = None
    http_timeout_s: float = Field(default=10.0, gt=0.0)
    http_max_chars: int = Field(default=1000, ge=1)
    worker_count: int = Field(default=2, ge=1)
    queue_maxsize: int = Field(default=100, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="TOOL_AGENT_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )

    def resolved_llm_api_key(self) -> str:
        return self.llm_api_key or os.getenv("GROQ_API_KEY", "")

    def resolved_database_path(self) -> Path:
        return self.database_path or self.sandbox_dir / "demo.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
