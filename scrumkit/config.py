"""
Scrumkit – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── App ──
    APP_NAME: str = "Scrumkit"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    APP_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./scrumkit.db"

    # ── Retrospective rules ──
    DEFAULT_VOTES_PER_USER: int = 5
    MAX_ITEM_LENGTH: int = 500

    # ── Change stream (SSE) ──
    SSE_HEARTBEAT_SECONDS: float = 30.0
    SSE_MAX_PENDING_EVENTS: int = 256

    # ── Report generation (OpenAI-compatible API) ──
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o"
    REPORT_TEMPERATURE: float = 0.7
    REPORT_MAX_TOKENS: int = 2000
    REPORT_TIMEOUT_SECONDS: float = 60.0
    DEFAULT_REPORT_LANGUAGE: str = "en"

settings = Settings()
