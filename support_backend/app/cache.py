#!/usr/bin/env python3
"""
Response cache for the support assistant.

Completions are keyed by the md5 of the exact prompt text. Entries expire
lazily on read once they are TTL seconds old, and the mapping is bounded with
least-recently-used eviction.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from ..schemas.documents import CompletionResult
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_MAX_ENTRIES = 1000


def get_cache_key(prompt: str) -> str:
    return hashlib.md5(prompt.encode("utf-8")).hexdigest()


class ResponseCache:
    """In-memory, process-local cache of provider results."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[CompletionResult, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, prompt: str) -> Optional[CompletionResult]:
        """
        Return the cached result for a prompt, or None on a miss.

        An expired entry is removed and reported as a miss.
        """
        key = get_cache_key(prompt)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            result, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
        logger.info("Using cached response")
        return result

    def put(self, prompt: str, result: CompletionResult) -> None:
        key = get_cache_key(prompt)
        with self._lock:
            self._entries[key] = (result, self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [
                key for key, (_, stored_at) in self._entries.items()
                if now - stored_at >= self.ttl_seconds
            ]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
