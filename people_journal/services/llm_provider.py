"""
LLM Provider - Anthropic Messages API or OpenAI Chat Completions,
selected by whichever credential is configured
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
import openai
from openai import AsyncOpenAI

from ..config import Settings, settings as default_settings
from ..core.exceptions import LLMConfigurationError, LLMResponseError, LLMTransportError
from ..utils.logging import get_logger

logger = get_logger(__name__)

NO_API_KEY_MESSAGE = "No API key configured. Set ANTHROPIC_API_KEY or OPENAI_API_KEY in .env"


class LLMProvider(ABC):
    """Sends a single-message prompt and returns the model's raw text"""

    name: str = "unknown"

    def __init__(self, api_key: str, settings: Settings):
        self.api_key = api_key
        self.settings = settings

    @property
    @abstractmethod
    def model(self) -> str:
        """Model id sent with every request"""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send ``prompt`` as one user message; raise LLMError on failure"""

    def _request_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.settings.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }


class AnthropicProvider(LLMProvider):
    name = "anthropic"

    @property
    def model(self) -> str:
        return self.settings.anthropic_model

    async def complete(self, prompt: str) -> str:
        """Call the Anthropic Messages API"""
        url = f"{self.settings.anthropic_base_url.rstrip('/')}/v1/messages"
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.settings.anthropic_version,
            "content-type": "application/json",
        }

        logger.info(f"Calling anthropic model {self.model}")
        try:
            async with httpx.AsyncClient(timeout=self.settings.llm_timeout) as client:
                response = await client.post(url, headers=headers, json=self._request_body(prompt))
        except httpx.HTTPError as e:
            logger.error(f"Anthropic API error: {e}")
            raise LLMTransportError(f"anthropic request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = response.text

        if not response.is_success:
            logger.error(f"Anthropic returned {response.status_code}")
            raise LLMResponseError(
                f"anthropic returned {response.status_code}: {data}",
                status=response.status_code,
                body=data
            )

        content = data.get("content") if isinstance(data, dict) else None
        return "".join(
            block.get("text", "")
            for block in content or []
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        )


class OpenAIProvider(LLMProvider):
    name = "openai"

    @property
    def model(self) -> str:
        return self.settings.openai_model

    def _client(self) -> AsyncOpenAI:
        kwargs: Dict[str, Any] = {
            "api_key": self.api_key,
            "base_url": self.settings.openai_api_base,
            "max_retries": 0,
        }
        if self.settings.llm_timeout is not None:
            kwargs["timeout"] = self.settings.llm_timeout
        return AsyncOpenAI(**kwargs)

    async def complete(self, prompt: str) -> str:
        """Call OpenAI-compatible chat completions"""
        logger.info(f"Calling openai model {self.model}")
        try:
            async with self._client() as client:
                response = await client.chat.completions.create(**self._request_body(prompt))
        except openai.APIStatusError as e:
            logger.error(f"OpenAI returned {e.status_code}")
            raise LLMResponseError(
                f"openai returned {e.status_code}: {e.message}",
                status=e.status_code,
                body=e.body
            ) from e
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise LLMTransportError(f"openai request failed: {e}") from e

        if not getattr(response, "choices", None):
            raise LLMResponseError("openai returned no choices")
        return response.choices[0].message.content or ""


def get_llm_provider(settings: Optional[Settings] = None) -> LLMProvider:
    """Pick the provider for the configured credential, Anthropic first"""
    settings = settings or default_settings

    if settings.anthropic_api_key:
        return AnthropicProvider(settings.anthropic_api_key, settings)
    if settings.openai_api_key:
        return OpenAIProvider(settings.openai_api_key, settings)
    raise LLMConfigurationError(NO_API_KEY_MESSAGE)
