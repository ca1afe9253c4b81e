#!/usr/bin/env python3
"""
Configuration management for the support assistant backend.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError
from ..utils.logger import get_logger
from ..utils.security import mask_secret

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

SUPPORTED_PROVIDERS = ("gemini", "openai", "claude", "mistral", "groq")


def _split_origins(raw: Optional[str]):
    if not raw:
        return list(DEFAULT_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Config:
    """Configuration class for the application."""

    # Server Configuration
    PORT = int(os.getenv("PORT", 5002))
    ENVIRONMENT = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development"))
    ALLOWED_ORIGINS = _split_origins(os.getenv("ALLOWED_ORIGINS"))

    # Database Configuration
    DB_PATH = os.getenv("DB_PATH", os.path.join(os.getcwd(), "database.sqlite"))
    DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}")

    # Documentation source
    DOCS_PATH = os.getenv(
        "DOCS_PATH",
        os.path.join(os.path.dirname(__file__), "..", "data", "docs.json"),
    )

    # Rate limiting (per client IP)
    RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes")
    RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", 100))
    RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", 15 * 60))

    # Application Configuration
    RELEVANCE_THRESHOLD = float(os.getenv("RELEVANCE_THRESHOLD", 0.5))
    CONTEXT_MESSAGES = int(os.getenv("CONTEXT_MESSAGES", 6))

    # Response cache
    CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", 60 * 60))
    CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", 1000))

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == "development"

    @classmethod
    def debug_print(cls):
        logger.info(f"[CONFIG] ENVIRONMENT={cls.ENVIRONMENT} PORT={cls.PORT}")
        logger.info(f"[CONFIG] DATABASE_URL={cls.DATABASE_URL}")
        logger.info(f"[CONFIG] DOCS_PATH={cls.DOCS_PATH}")
        logger.info(f"[CONFIG] ALLOWED_ORIGINS={','.join(cls.ALLOWED_ORIGINS)}")


@dataclass(frozen=True)
class LLMSettings:
    """Immutable provider settings handed to the generation client."""

    provider: str
    api_key: str
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 1000
    timeout: float = 30.0

    def __post_init__(self):
        if not self.api_key:
            raise ConfigurationError("LLM_API_KEY is not set. Please add it to your .env file.")
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported LLM provider: {self.provider}. "
                f"Expected one of: {', '.join(SUPPORTED_PROVIDERS)}"
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "LLMSettings":
        """Resolve provider settings once from the environment."""
        env = os.environ if env is None else env
        try:
            temperature = float(env.get("LLM_TEMPERATURE") or 0.7)
            max_tokens = int(env.get("LLM_MAX_TOKENS") or 1000)
            timeout = float(env.get("LLM_TIMEOUT_SECONDS") or 30)
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric LLM setting: {e}") from e

        settings = cls(
            provider=(env.get("LLM_PROVIDER") or "gemini").strip().lower(),
            api_key=env.get("LLM_API_KEY") or "",
            model=env.get("LLM_MODEL") or None,
            temperature=temperature,
            max_tokens=max_tokens,
            timeout=timeout,
        )
        logger.info(
            f"[CONFIG] LLM_PROVIDER={settings.provider} model={settings.model or '(provider default)'} "
            f"key={mask_secret(settings.api_key)}"
        )
        return settings
