"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_VISION_API_URL = "https://open.bigmodel.cn/api/paas/v4/chat/completions"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    vision_api_key: str | None = None
    vision_api_url: str = DEFAULT_VISION_API_URL
    vision_model: str = "glm-4.6v-flash"
    vision_provider: Literal["http", "openai"] = "http"
    vision_temperature: float = 0.3
    vision_max_tokens: int = 4096
    vision_timeout_seconds: float = 60.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_api_key(raw: str | None) -> str | None:
    """Treat blank credentials as missing."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
