"""Vision request gateway for meal photo recognition."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from calorie_snap.domain.errors import (
    ConfigurationError,
    EmptyResponseError,
    InvalidInputError,
    MalformedResponseError,
    RecognitionDeclinedError,
    TruncatedResponseError,
)
from calorie_snap.domain.foods import RecognitionResult
from calorie_snap.domain.recognition import RecognitionDecline
from calorie_snap.services.normalizer import normalize_recognition

logger = logging.getLogger(__name__)

TRUNCATION_THRESHOLD = 500

RECOGNITION_PROMPT = """你是一个专业的营养分析助手。请分析图片中的食物，并只返回 JSON。

任务:
1. 识别图片中所有可见的食物
2. 估算每种食物的重量（克）
3. 估算热量（大卡）、蛋白质、碳水化合物和脂肪（克）
4. 为每种食物以及每个数值给出 0-100 的置信度

返回格式（必须严格遵守）:
{
  "foods": [
    {
      "food_name": "食物名称",
      "confidence": 整体置信度,
      "estimated_weight_g": {"value": 重量, "confidence": 置信度},
      "calories": {"value": 热量, "confidence": 置信度},
      "protein_g": {"value": 蛋白质, "confidence": 置信度},
      "carbs_g": {"value": 碳水化合物, "confidence": 置信度},
      "fat_g": {"value": 脂肪, "confidence": 置信度}
    }
  ],
  "total_calories": 总热量
}

置信度标准:
- 90-100: 非常确定，食物清晰可见
- 70-89: 比较确定，可能有小误差
- 50-69: 中等确定，建议用户确认
- 0-49: 不确定，强烈建议用户检查

如果图片模糊或无法识别食物，返回:
{
  "error": "无法识别，请重新拍照",
  "suggestion": "建议: 靠近一些，确保光线充足"
}"""

_OPENING_FENCE = re.compile(r"^```[A-Za-z]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


class VisionClient(Protocol):
    """Interface for a chat-style multimodal model endpoint."""

    async def complete(
        self,
        *,
        model: str,
        image_url: str,
        prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        """Return the model's text content, or None when it sent none.

        Implementations raise UpstreamServiceError for non-success responses.
        """


@dataclass
class RecognitionService:
    """Builds the recognition request and turns the reply into food entries."""

    client: VisionClient | None
    model: str
    temperature: float = 0.3
    max_tokens: int = 4096

    async def recognize(self, image: object) -> RecognitionResult:
        """Recognize foods in an image given as a data URI or HTTP(S) URL."""
        image_url = validate_image_reference(image)
        logger.info("Image received, length: %s", len(image_url))
        if self.client is None:
            logger.error("Vision API key is not configured")
            raise ConfigurationError()

        logger.info("Calling vision model %s", self.model)
        content = await self.client.complete(
            model=self.model,
            image_url=image_url,
            prompt=RECOGNITION_PROMPT,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        if not content or not content.strip():
            logger.error("Vision model returned empty content")
            raise EmptyResponseError()
        logger.info("Vision model content length: %s", len(content))

        payload = parse_model_content(content)
        if RecognitionDecline.matches(payload):
            decline = RecognitionDecline.model_validate(payload)
            logger.info("Vision model declined: %s", decline.error)
            raise RecognitionDeclinedError(
                decline.error or None, suggestion=decline.suggestion
            )
        return normalize_recognition(payload)


def validate_image_reference(image: object) -> str:
    """Reject anything that is not a data-URI image or an absolute HTTP(S) URL."""
    if not isinstance(image, str) or not image.strip():
        raise InvalidInputError("请提供图片")
    if not image.startswith(("data:image", "http://", "https://")):
        raise InvalidInputError()
    return image


def strip_code_fences(content: str) -> str:
    """Remove a Markdown code fence wrapped around the model's JSON."""
    text = content.strip()
    if text.startswith("```"):
        text = _OPENING_FENCE.sub("", text, count=1)
        text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_model_content(content: str) -> dict[str, object]:
    """Parse model content into a JSON object, classifying parse failures."""
    text = strip_code_fences(content)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse vision model content: %s", text)
        if looks_truncated(text):
            raise TruncatedResponseError() from exc
        raise MalformedResponseError() from exc
    if not isinstance(parsed, dict):
        logger.error("Vision model content is not a JSON object: %s", text)
        raise MalformedResponseError()
    return parsed


def looks_truncated(text: str) -> bool:
    """Long content that never closes its outer object was likely cut off."""
    return len(text) > TRUNCATION_THRESHOLD and not text.rstrip().endswith("}")
