#!/usr/bin/env python3
"""
Tests for provider settings resolution.
"""

import dataclasses
import unittest

from support_backend.app.config import LLMSettings
from support_backend.app.errors import ConfigurationError
from support_backend.utils.security import mask_secret


class TestLLMSettings(unittest.TestCase):

    def test_defaults(self):
        settings = LLMSettings.from_env({"LLM_API_KEY": "secret-key"})
        self.assertEqual(settings.provider, "gemini")
        self.assertIsNone(settings.model)
        self.assertEqual(settings.temperature, 0.7)
        self.assertEqual(settings.max_tokens, 1000)
        self.assertEqual(settings.timeout, 30.0)

    def test_overrides(self):
        settings = LLMSettings.from_env({
            "LLM_PROVIDER": " OpenAI ",
            "LLM_API_KEY": "k",
            "LLM_MODEL": "gpt-4o-mini",
            "LLM_TEMPERATURE": "0.2",
            "LLM_MAX_TOKENS": "256",
            "LLM_TIMEOUT_SECONDS": "5",
        })
        self.assertEqual(settings.provider, "openai")
        self.assertEqual(settings.model, "gpt-4o-mini")
        self.assertEqual(settings.temperature, 0.2)
        self.assertEqual(settings.max_tokens, 256)
        self.assertEqual(settings.timeout, 5.0)

    def test_missing_key(self):
        with self.assertRaises(ConfigurationError) as ctx:
            LLMSettings.from_env({"LLM_PROVIDER": "gemini"})
        self.assertIn("LLM_API_KEY", ctx.exception.message)

    def test_unknown_provider(self):
        with self.assertRaises(ConfigurationError) as ctx:
            LLMSettings.from_env({"LLM_PROVIDER": "bard", "LLM_API_KEY": "k"})
        self.assertIn("bard", ctx.exception.message)

    def test_invalid_number(self):
        with self.assertRaises(ConfigurationError):
            LLMSettings.from_env({"LLM_API_KEY": "k", "LLM_MAX_TOKENS": "lots"})

    def test_frozen(self):
        settings = LLMSettings(provider="groq", api_key="k")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            settings.provider = "openai"


class TestMaskSecret(unittest.TestCase):

    def test_mask(self):
        self.assertEqual(mask_secret(None), "(unset)")
        self.assertEqual(mask_secret("abcdefghijkl"), "abcd...ijkl")
        self.assertNotIn("abc", mask_secret("abcdef"))


if __name__ == "__main__":
    unittest.main()
