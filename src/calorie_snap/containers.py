"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_snap.adapters.chat_vision_client import HttpxChatVisionClient
from calorie_snap.adapters.openai_vision_client import OpenAIVisionClient
from calorie_snap.adapters.supabase_meal_repository import SupabaseMealRepository
from calorie_snap.config import Settings, resolve_api_key
from calorie_snap.services.meals import MealService
from calorie_snap.services.recognition import RecognitionService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    recognition_service: RecognitionService
    meal_service: MealService
    close_resources: Callable[[], Awaitable[None]]


def build_vision_client(
    settings: Settings,
) -> HttpxChatVisionClient | OpenAIVisionClient | None:
    """Create the configured vision client, or None without a credential."""
    api_key = resolve_api_key(settings.vision_api_key)
    if api_key is None:
        logger.warning("VISION_API_KEY is not set; recognition will be unavailable")
        return None
    if settings.vision_provider == "openai":
        return OpenAIVisionClient.create(
            api_key=api_key,
            api_url=settings.vision_api_url,
            timeout=settings.vision_timeout_seconds,
        )
    return HttpxChatVisionClient.create(
        api_key=api_key,
        api_url=settings.vision_api_url,
        timeout=settings.vision_timeout_seconds,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    vision_client = build_vision_client(resolved_settings)
    recognition_service = RecognitionService(
        client=vision_client,
        model=resolved_settings.vision_model,
        temperature=resolved_settings.vision_temperature,
        max_tokens=resolved_settings.vision_max_tokens,
    )
    meal_service = MealService(SupabaseMealRepository(supabase_client))

    async def close_resources() -> None:
        if vision_client is not None:
            await vision_client.close()

    return AppContainer(
        settings=resolved_settings,
        recognition_service=recognition_service,
        meal_service=meal_service,
        close_resources=close_resources,
    )
