#!/usr/bin/env python3
"""
Generation module for the support assistant.

This module sends prompts to the configured completion provider (Gemini,
OpenAI, Claude, Mistral or Groq) and normalizes every answer into a
``CompletionResult``. Results are cached by prompt.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from .cache import ResponseCache
from .config import LLMSettings
from .errors import ConfigurationError, ProviderError, ProviderTimeoutError
from ..schemas.documents import CompletionResult
from ..utils.logger import get_logger

logger = get_logger(__name__)


class CompletionProvider(ABC):
    """One hosted completion API."""

    name = "provider"
    default_model = ""

    def __init__(self, settings: LLMSettings, http: Optional[requests.Session] = None):
        self.api_key = settings.api_key
        self.model = settings.model or self.default_model
        self.timeout = settings.timeout
        self.http = http or requests.Session()

    def send(self, prompt: str, temperature: float, max_tokens: int) -> CompletionResult:
        """
        Send a prompt and return the reply with its token count.

        Args:
            prompt: Complete prompt text
            temperature: Sampling temperature
            max_tokens: Maximum output tokens

        Returns:
            Normalized completion result
        """
        url, params, headers, payload = self.build_request(prompt, temperature, max_tokens)
        logger.info(f"Calling {self.name} API, model={self.model}, prompt length={len(prompt)}")
        try:
            response = self.http.post(
                url, params=params, headers=headers, json=payload, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            raise ProviderTimeoutError(
                f"{self.name} API error: request timed out after {self.timeout}s"
            ) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"{self.name} API error: {e}") from e

        if not response.ok:
            message = self._error_message(response)
            logger.error(f"{self.name} API returned {response.status_code}: {message}")
            raise ProviderError(f"{self.name} API error: {message}", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"{self.name} API error: invalid JSON response", response.status_code) from e

        if not isinstance(data, dict):
            raise ProviderError(f"{self.name} API error: invalid JSON response", response.status_code)

        try:
            reply = self.parse_reply(data) or f"No response from {self.name}"
            return CompletionResult(reply=reply, tokens_used=self.parse_tokens(data) or 0)
        except (AttributeError, TypeError, PydanticValidationError) as e:
            raise ProviderError(f"{self.name} API error: malformed response", response.status_code) from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return "Unknown error"
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        return "Unknown error"

    @abstractmethod
    def build_request(self, prompt: str, temperature: float, max_tokens: int):
        """Return (url, params, headers, payload)."""

    @abstractmethod
    def parse_reply(self, data: Dict[str, Any]) -> Optional[str]:
        ...

    @abstractmethod
    def parse_tokens(self, data: Dict[str, Any]) -> Optional[int]:
        ...


class GeminiProvider(CompletionProvider):
    name = "Gemini"
    default_model = "gemini-pro"

    def build_request(self, prompt, temperature, max_tokens):
        url = f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        return url, {"key": self.api_key}, {"Content-Type": "application/json"}, payload

    def parse_reply(self, data):
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None

    def parse_tokens(self, data):
        return (data.get("usageMetadata") or {}).get("totalTokenCount")


class ChatCompletionsProvider(CompletionProvider):
    """OpenAI-compatible ``/chat/completions`` endpoint."""

    url = ""

    def build_request(self, prompt, temperature, max_tokens):
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        return self.url, None, headers, payload

    def parse_reply(self, data):
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None

    def parse_tokens(self, data):
        return (data.get("usage") or {}).get("total_tokens")


class OpenAIProvider(ChatCompletionsProvider):
    name = "OpenAI"
    default_model = "gpt-3.5-turbo"
    url = "https://api.openai.com/v1/chat/completions"


class MistralProvider(ChatCompletionsProvider):
    name = "Mistral"
    default_model = "mistral-small"
    url = "https://api.mistral.ai/v1/chat/completions"


class GroqProvider(ChatCompletionsProvider):
    name = "Groq"
    default_model = "llama3-8b-8192"
    url = "https://api.groq.com/openai/v1/chat/completions"


class ClaudeProvider(CompletionProvider):
    name = "Claude"
    default_model = "claude-3-sonnet-20240229"

    def build_request(self, prompt, temperature, max_tokens):
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        return "https://api.anthropic.com/v1/messages", None, headers, payload

    def parse_reply(self, data):
        try:
            return data["content"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None

    def parse_tokens(self, data):
        usage = data.get("usage") or {}
        return (usage.get("input_tokens") or 0) + (usage.get("output_tokens") or 0)


PROVIDERS = {
    "gemini": GeminiProvider,
    "openai": OpenAIProvider,
    "claude": ClaudeProvider,
    "mistral": MistralProvider,
    "groq": GroqProvider,
}


def build_provider(settings: LLMSettings, http: Optional[requests.Session] = None) -> CompletionProvider:
    provider_cls = PROVIDERS.get(settings.provider)
    if provider_cls is None:
        raise ConfigurationError(f"Unsupported LLM provider: {settings.provider}")
    return provider_cls(settings, http=http)


class GenerationClient:
    """Client for generating answers through one completion provider."""

    def __init__(
        self,
        settings: LLMSettings,
        cache: Optional[ResponseCache] = None,
        http: Optional[requests.Session] = None,
        provider: Optional[CompletionProvider] = None,
    ):
        """Initialize the generation client; the provider is fixed from here on."""
        self.settings = settings
        self.cache = cache if cache is not None else ResponseCache()
        self.provider = provider or build_provider(settings, http=http)

    def complete(self, prompt: str) -> CompletionResult:
        """
        Generate an answer for a prompt.

        Args:
            prompt: Fully assembled prompt

        Returns:
            Reply text and tokens used

        Raises:
            ProviderError: upstream failure, never retried
        """
        cached = self.cache.get(prompt)
        if cached is not None:
            return cached

        result = self.provider.send(prompt, self.settings.temperature, self.settings.max_tokens)
        logger.info(f"{self.provider.name} reply received, tokens used: {result.tokens_used}")

        self.cache.put(prompt, result)
        return result
