"""Completion API wrapper supporting OpenAI and Claude."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from anthropic import AsyncAnthropic

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

MAX_TOKENS = 1024


def strip_code_fence(response: str) -> str:
    """Remove a markdown code fence around a JSON answer."""
    response = response.strip()
    if response.startswith("```json"):
        response = response[7:]
    if response.startswith("```"):
        response = response[3:]
    if response.endswith("```"):
        response = response[:-3]
    return response.strip()


class LLMProvider(ABC):
    """Abstract base class for completion providers."""

    @abstractmethod
    async def complete(self, prompt: str, system: str | None = None) -> str:
        """Send a completion request and return the response text.

        Args:
            prompt: The user prompt to send.
            system: Optional system prompt for context.

        Returns:
            The model's response text.
        """
        pass

    async def complete_json(
        self, prompt: str, system: str | None = None
    ) -> dict[str, Any]:
        """Send a completion request expecting JSON response.

        Raises:
            json.JSONDecodeError: If the response is not valid JSON.
        """
        json_system = (system or "") + "\nRespond only with valid JSON."
        response = await self.complete(prompt, json_system.strip())
        return json.loads(strip_code_fence(response))

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying client."""
        pass


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions implementation using httpx."""

    API_URL = "https://api.openai.com/v1/chat/completions"
    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=60.0)
        return self._client

    async def complete(self, prompt: str, system: str | None = None) -> str:
        """Send a completion request to OpenAI."""
        logger.debug(f"OpenAI completion request: {prompt[:100]}...")
        client = await self._get_client()

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await client.post(
            self.API_URL,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={"model": self.model, "messages": messages},
        )
        response.raise_for_status()

        data = response.json()
        return data["choices"][0]["message"]["content"]

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


class ClaudeProvider(LLMProvider):
    """Claude API implementation using the anthropic SDK."""

    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        client: AsyncAnthropic | None = None,
    ):
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self._client = client or AsyncAnthropic(api_key=api_key)

    async def complete(self, prompt: str, system: str | None = None) -> str:
        """Send a completion request to Claude."""
        logger.debug(f"Claude completion request: {prompt[:100]}...")

        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": MAX_TOKENS,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system

        message = await self._client.messages.create(**request)
        # text blocks only
        return "".join(block.text for block in message.content if block.type == "text")

    async def close(self) -> None:
        """Close the anthropic client."""
        await self._client.close()


def get_llm_provider(settings: Settings | None = None) -> LLMProvider:
    """Factory function to get the configured completion provider.

    Args:
        settings: Optional settings instance. Uses global settings if not provided.

    Returns:
        Configured provider instance. The caller owns it and must ``close()`` it.

    Raises:
        ValueError: If the API key is missing or the provider is not supported.
    """
    if settings is None:
        settings = get_settings()

    if settings.llm_provider == "claude":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY is required for Claude provider")
        return ClaudeProvider(settings.anthropic_api_key)

    if settings.llm_provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for OpenAI provider")
        return OpenAIProvider(settings.openai_api_key, settings.openai_model)

    raise ValueError(f"Unsupported LLM provider: {settings.llm_provider}")
