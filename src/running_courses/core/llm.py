"""Text completion against the Gemini generateContent REST endpoint."""

import logging
from abc import ABC, abstractmethod

import httpx

from ..errors import UpstreamServiceError

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class TextModel(ABC):
    """Prompt in, free text out. No structural guarantee on the text."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        ...

    @property
    def is_configured(self) -> bool:
        return True


class GeminiClient(TextModel):
    def __init__(self, api_key: str, model: str = "gemini-1.5-flash", timeout_s: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise UpstreamServiceError("model", "GEMINI_API_KEY is not configured")

        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                headers={"x-goog-api-key": self.api_key},
            ) as client:
                response = await client.post(GEMINI_URL.format(model=self.model), json=body)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamServiceError(
                "model", f"HTTP {exc.response.status_code}", status=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError("model", f"request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamServiceError("model", f"response is not valid JSON: {exc}") from exc

        try:
            candidates = data.get("candidates") or []
            if not candidates:
                feedback = data.get("promptFeedback", {})
                raise UpstreamServiceError("model", f"no candidates returned ({feedback})")

            parts = candidates[0].get("content", {}).get("parts", [])
            text = "".join(part.get("text", "") for part in parts)
        except (AttributeError, TypeError, KeyError) as exc:
            raise UpstreamServiceError("model", f"unexpected response shape: {exc}") from exc
        logger.debug("Model returned %d characters", len(text))
        return text
