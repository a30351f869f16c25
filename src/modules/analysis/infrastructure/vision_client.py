"""Client for the external vision-language model used to analyze tree images."""

import asyncio
from typing import Any

import aiohttp

from src.api.core.exceptions.base import (
    ConfigurationError,
    UpstreamFailure,
    UpstreamModelError,
)
from src.modules.carbon.constants import MODEL_LAND_COVER_CLASSES
from src.utils.logger import get_logger
from src.utils.settings.vision import VisionModelSettings, vision_settings

logger = get_logger(__name__)

_LAND_COVER_CHOICES = ", ".join(c.value for c in MODEL_LAND_COVER_CLASSES)

SYSTEM_PROMPT = f"""You are an expert forestry analyst. Analyze tree images and provide estimates for carbon credit calculation.

CRITICAL: If the image does NOT contain any trees, forests, or vegetation suitable for carbon credits, you MUST return tree_count as 0.

Examples of images to REJECT (return tree_count: 0):
- People, animals, buildings
- Indoor scenes
- Urban environments without trees
- Non-vegetation images

Return ONLY a valid JSON object with this exact structure (no markdown, no code blocks):
{{
  "tree_count": <number of visible trees, or 0 if NO trees present>,
  "land_cover_class": "<one of: {_LAND_COVER_CHOICES}>",
  "estimated_area_hectares": <estimated area in hectares based on tree density>,
  "confidence": "<low/medium/high>",
  "analysis_notes": "<brief description of what you see>"
}}"""

USER_INSTRUCTION = "Analyze this tree image and provide carbon estimation parameters."

_STATUS_FAILURES = {
    429: UpstreamFailure.RATE_LIMITED,
    402: UpstreamFailure.QUOTA_EXHAUSTED,
}


class VisionModelClient:
    """Client for chat-completions style multimodal inference requests."""

    def __init__(self, settings: VisionModelSettings | None = None):
        settings = settings or vision_settings
        self.url = settings.VISION_MODEL_URL
        self.model = settings.VISION_MODEL_NAME
        self.timeout = settings.VISION_MODEL_TIMEOUT
        self._api_key = settings.VISION_MODEL_API_KEY.get_secret_value().strip()

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def build_payload(self, image_reference: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": USER_INSTRUCTION},
                        {"type": "image_url", "image_url": {"url": image_reference}},
                    ],
                },
            ],
            "temperature": 0,
        }

    async def analyze_image(self, image_reference: str) -> str:
        """Send the image reference to the model and return its raw text answer."""
        if not self.is_configured:
            raise ConfigurationError("VISION_MODEL_API_KEY")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        async with aiohttp.ClientSession() as session:
            try:
                async with session.post(
                    self.url,
                    json=self.build_payload(image_reference),
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        logger.error(
                            f"Vision model error: {response.status}",
                            body=error_text[:500],
                        )
                        raise self._error_for_status(response.status, error_text)
                    data = await response.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f"Vision model request failed: {e!r}")
                raise UpstreamModelError(
                    UpstreamFailure.UNAVAILABLE, "Vision model unreachable"
                ) from e
            except ValueError as e:
                logger.error(f"Vision model returned a non-JSON envelope: {e}")
                raise UpstreamModelError(
                    UpstreamFailure.INVALID_RESPONSE, "Response body is not JSON"
                ) from e

        return self._extract_content(data)

    @staticmethod
    def _error_for_status(status_code: int, error_text: str) -> UpstreamModelError:
        reason = _STATUS_FAILURES.get(status_code, UpstreamFailure.UNAVAILABLE)
        if reason is UpstreamFailure.UNAVAILABLE:
            return UpstreamModelError(
                reason, f"AI analysis failed with status {status_code}"
            )
        return UpstreamModelError(reason)

    @staticmethod
    def _extract_content(data: Any) -> str:
        """Pull choices[0].message.content out of the response envelope."""
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        # Some providers return content as a list of typed parts
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )

        if not isinstance(content, str) or not content.strip():
            raise UpstreamModelError(
                UpstreamFailure.INVALID_RESPONSE, "No content in AI response"
            )
        return content


async def get_vision_client() -> VisionModelClient:
    """Get vision model client for dependency injection."""
    return VisionModelClient()
