"""
In-process TTL cache for computed club read models (dashboard, communication stats).
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from clubflow.config import settings

logger = logging.getLogger(__name__)


class MemoryCache:
    def __init__(self, default_ttl: int = 300, max_size: int = 5000):
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            value, expiry = entry
            if now >= expiry:
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expiry = time.monotonic() + (ttl if ttl is not None else self.default_ttl)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict_oldest()
            self._entries[key] = (value, expiry)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            keys = [k for k in self._entries if k.startswith(prefix)]
            for k in keys:
                del self._entries[k]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        value = self.get(key)
        if value is not None:
            logger.debug(f"Cache hit: {key}")
            return value
        logger.debug(f"Cache miss: {key}")
        value = factory()
        self.set(key, value, ttl)
        return value

    def cleanup(self) -> int:
        """Drop expired entries; returns how many were removed."""
        now = time.monotonic()
        with self._lock:
            expired = [k for k, (_, expiry) in self._entries.items() if now >= expiry]
            for k in expired:
                del self._entries[k]
        if expired:
            logger.debug(f"Cache cleanup removed {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total, 3) if total else 0.0,
            }

    def _evict_oldest(self) -> None:
        oldest = min(self._entries.items(), key=lambda item: item[1][1])[0]
        del self._entries[oldest]


response_cache = MemoryCache(default_ttl=settings.cache_ttl_seconds)


def get_cache() -> MemoryCache:
    return response_cache
