"""In-memory, time-expiring cache for encoded thumbnails."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from ..plugins.image_scale.schema import TransformResult


@dataclass(frozen=True)
class CacheEntry:
    result: TransformResult
    expires_at: float


def make_cache_key(
    url: str,
    height: int | None,
    width: int | None,
    format: str,
    quality: int | None,
) -> str:
    """Cache key for one request.

    Format and quality are part of the key so that requests for the same
    URL and size in different encodings do not collide.
    """
    h = "" if height is None else str(height)
    w = "" if width is None else str(width)
    q = "" if quality is None else str(quality)
    return f"{url}|h={h}|w={w}|f={format}|q={q}"


class ResponseCache:
    """Thread-safe TTL cache. Entries expire after ttl_seconds; nothing else evicts them."""

    def __init__(
        self,
        ttl_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds: float = ttl_seconds
        self._clock: Callable[[], float] = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock: threading.Lock = threading.Lock()

    def get(self, key: str) -> TransformResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
        logger.info(f"Cache hit: {key}")
        return entry.result

    def put(self, key: str, result: TransformResult) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(result=result, expires_at=self._clock() + self.ttl_seconds)

    def purge_expired(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
