"""Chat-completions vision client implemented with httpx."""

import json
import logging
from dataclasses import dataclass

import httpx

from calorie_snap.domain.errors import MalformedResponseError, UpstreamServiceError
from calorie_snap.services.recognition import VisionClient

logger = logging.getLogger(__name__)


@dataclass
class HttpxChatVisionClient(VisionClient):
    """Vision client for OpenAI-compatible chat-completions endpoints."""

    api_key: str
    api_url: str
    http_client: httpx.AsyncClient
    timeout: float = 60.0

    @classmethod
    def create(
        cls, api_key: str, api_url: str, timeout: float = 60.0
    ) -> "HttpxChatVisionClient":
        """Create a client with a managed httpx session."""
        return cls(
            api_key=api_key,
            api_url=api_url,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
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
        """Send one image and prompt, returning the model's text content."""
        payload = {
            "model": model,
            "messages": build_messages(image_url, prompt),
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            response = await self.http_client.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
                timeout=self.timeout,
            )
        except httpx.TransportError as exc:
            logger.exception("Vision API request failed")
            raise UpstreamServiceError() from exc

        if not response.is_success:
            logger.error(
                "Vision API error %s: %s", response.status_code, response.text
            )
            raise UpstreamServiceError(
                extract_error_message(response.text),
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Vision API returned a non-JSON body: %s", response.text)
            raise MalformedResponseError() from exc
        return extract_content(data)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def build_messages(image_url: str, prompt: str) -> list[dict[str, object]]:
    """Build a single user message carrying the image and the instruction."""
    return [
        {
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": image_url}},
                {"type": "text", "text": prompt},
            ],
        }
    ]


def extract_content(data: object) -> str | None:
    """Pull ``choices[0].message.content`` out of a chat-completions body."""
    content = None
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict):
                content = _content_text(message.get("content"))
        if not content and data.get("error"):
            logger.error("Vision API returned an error body: %s", data)
            message_text = _message_from_json(data) or str(data["error"])
            raise UpstreamServiceError(f"API错误: {message_text}")
    return content


def extract_error_message(body: str) -> str:
    """Best-effort human-readable message from an upstream error body.

    JSON bodies yield ``error.message``, a string ``error`` or ``message``.
    Anything else is surfaced as raw text.
    """
    default = UpstreamServiceError.default_message
    if not body or not body.strip():
        return default
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return f"API错误: {body.strip()}"
    return _message_from_json(data) or default


def _message_from_json(data: object) -> str | None:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(error, str) and error:
        return error
    message = data.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def _content_text(content: object) -> str | None:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [
            str(part.get("text", ""))
            for part in content
            if isinstance(part, dict) and part.get("type") == "text"
        ]
        return "".join(parts) or None
    return None
