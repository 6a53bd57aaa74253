"""
OpenAI-compatible chat completion client used for report prose.

Talks to ``{OPENAI_BASE_URL}/chat/completions`` over httpx. Every failure
mode (no key configured, transport error, non-2xx, malformed body, empty
answer) surfaces as ``GenerationFailed``; retrying is up to the caller.
"""

import logging
from typing import Optional

import httpx

from scrumkit.config import settings
from scrumkit.errors import GenerationFailed

logger = logging.getLogger(__name__)


class OpenAITextGenerator:
    """Request/response text generation over the chat completions API."""

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "OpenAITextGenerator":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            model=settings.OPENAI_MODEL,
            temperature=settings.REPORT_TEMPERATURE,
            max_tokens=settings.REPORT_MAX_TOKENS,
            timeout=settings.REPORT_TIMEOUT_SECONDS,
        )

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        if not self.api_key:
            raise GenerationFailed("Report generation is not configured (OPENAI_API_KEY is empty)")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": self.model,
                        "messages": [
                            {"role": "system", "content": system_prompt},
                            {"role": "user", "content": user_prompt},
                        ],
                        "temperature": self.temperature,
                        "max_tokens": self.max_tokens,
                    },
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as e:
            logger.warning(f"Chat completion request failed: {e}")
            raise GenerationFailed("Failed to generate report") from e
        except ValueError as e:
            logger.warning(f"Chat completion returned invalid JSON: {e}")
            raise GenerationFailed("Failed to generate report") from e

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            logger.warning(f"Unexpected chat completion payload: {data!r}")
            raise GenerationFailed("Failed to generate report") from e

        content = content.strip()
        if not content:
            raise GenerationFailed("The text generation service returned an empty report")
        return content
