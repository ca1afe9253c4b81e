#!/usr/bin/env python3
"""
Tests for the prompt-keyed response cache.
"""

import unittest

from support_backend.app.cache import ResponseCache, get_cache_key
from support_backend.schemas.documents import CompletionResult


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestResponseCache(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.cache = ResponseCache(ttl_seconds=3600, max_entries=3, clock=self.clock)
        self.result = CompletionResult(reply="We refund within 30 days.", tokens_used=12)

    def test_cache_key_is_md5_of_prompt(self):
        self.assertEqual(get_cache_key(""), "d41d8cd98f00b204e9800998ecf8427e")
        self.assertNotEqual(get_cache_key("a"), get_cache_key("a "))

    def test_miss_then_hit(self):
        self.assertIsNone(self.cache.get("prompt"))
        self.cache.put("prompt", self.result)
        self.assertEqual(self.cache.get("prompt"), self.result)
        self.assertIsNone(self.cache.get("prompt "))

    def test_hit_just_before_ttl(self):
        self.cache.put("prompt", self.result)
        self.clock.now += 3599.9
        self.assertEqual(self.cache.get("prompt"), self.result)

    def test_expired_at_ttl(self):
        self.cache.put("prompt", self.result)
        self.clock.now += 3600
        self.assertIsNone(self.cache.get("prompt"))
        self.assertEqual(len(self.cache), 0)

    def test_put_refreshes_timestamp(self):
        self.cache.put("prompt", self.result)
        self.clock.now += 3000
        self.cache.put("prompt", self.result)
        self.clock.now += 3000
        self.assertEqual(self.cache.get("prompt"), self.result)

    def test_least_recently_used_evicted(self):
        for prompt in ("a", "b", "c"):
            self.cache.put(prompt, self.result)
        self.cache.get("a")
        self.cache.put("d", self.result)

        self.assertEqual(len(self.cache), 3)
        self.assertIsNone(self.cache.get("b"))
        for prompt in ("a", "c", "d"):
            self.assertIsNotNone(self.cache.get(prompt))

    def test_purge_expired(self):
        self.cache.put("old", self.result)
        self.clock.now += 2000
        self.cache.put("new", self.result)
        self.clock.now += 1600

        self.assertEqual(self.cache.purge_expired(), 1)
        self.assertEqual(len(self.cache), 1)
        self.assertIsNotNone(self.cache.get("new"))

    def test_clear(self):
        self.cache.put("a", self.result)
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)


if __name__ == "__main__":
    unittest.main()
