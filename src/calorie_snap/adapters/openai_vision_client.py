"""OpenAI SDK client for OpenAI-compatible vision endpoints."""

import logging
from dataclasses import dataclass

from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from calorie_snap.adapters.chat_vision_client import (
    build_messages,
    extract_error_message,
)
from calorie_snap.domain.errors import UpstreamServiceError
from calorie_snap.services.recognition import VisionClient

logger = logging.getLogger(__name__)


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client backed by the OpenAI chat-completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(
        cls, api_key: str, api_url: str, timeout: float = 60.0
    ) -> "OpenAIVisionClient":
        """Create a client; ``api_url`` may be the full chat-completions URL."""
        base_url = api_url.removesuffix("/").removesuffix("/chat/completions")
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
            )
        )

    async def complete(
        self,
        *,
        model: str,
        image_url: str,
        prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        """Call chat completions and return the first choice's content."""
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=build_messages(image_url, prompt),
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except APIStatusError as exc:
            body = exc.response.text
            logger.error("Vision API error %s: %s", exc.status_code, body)
            raise UpstreamServiceError(
                extract_error_message(body), status_code=exc.status_code
            ) from exc
        except APIConnectionError as exc:
            logger.exception("Vision API request failed")
            raise UpstreamServiceError() from exc

        if not response.choices:
            return None
        return response.choices[0].message.content

    async def close(self) -> None:
        """Close the underlying SDK client."""
        await self.client.close()
