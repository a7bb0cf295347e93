"""In-memory read cache for resolved links

This module provides a small time-to-live cache mapping keys to decoded URLs.
It shields the store from repeated lookups of popular keys.

Responsibilities:
    - Serve key -> URL lookups without a store round trip while fresh
    - Expire entries after a fixed TTL (24 hours by default)
    - Sweep expired entries periodically from a background thread (hourly by default)

Classes:
    LinkCache:
        Thread-safe TTL cache of resolved links, backed by cachetools.TTLCache.

Example:
    >>> cache = LinkCache(CacheSettings(ttl=60))
    >>> cache.get('abc') is None
    True
    >>> cache.set('abc', 'https://example.com')
    >>> cache.get('abc')
    'https://example.com'

NOTE:
    - The cache is derived data. It is only written after a resolve miss, never
      on the create path, and losing it only costs extra store lookups.
"""

import time
import logging
import threading

from cachetools import TTLCache

from shortkey.utils.config import CacheSettings


logger = logging.getLogger(__name__)


def _monotonic() -> float:
    # Looked up on every call so frozen clocks in tests apply
    return time.monotonic()


class LinkCache:
    """Thread-safe TTL cache of key -> decoded URL

    Attributes:
        settings (CacheSettings):
            TTL, sweep interval and max number of entries.

    Methods:
        get(key: str) -> str | None:
            Return the cached URL, or None on miss or expiry.

        set(key: str, url: str) -> None:
            Insert or replace an entry with a fresh expiry.

        expire() -> int:
            Remove all expired entries, return how many were removed.

        clear() -> None:
            Drop every entry.

        start_sweeper() -> threading.Thread:
            Start the periodic background sweep (idempotent).
    """

    def __init__(self, settings: CacheSettings | None = None):
        self.settings = settings or CacheSettings()
        self._entries: TTLCache[str, str] = TTLCache(maxsize=self.settings.maxsize, ttl=self.settings.ttl, timer=_monotonic)
        self._lock = threading.Lock()
        self._sweeper: threading.Thread | None = None

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, url: str) -> None:
        with self._lock:
            self._entries[key] = url

    def expire(self) -> int:
        with self._lock:
            expired = self._entries.expire()
        # cachetools >= 5.3 returns the expired (key, value) pairs
        return len(expired) if expired is not None else 0

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def start_sweeper(self) -> threading.Thread:
        """Start a daemon thread removing expired entries every sweep interval"""
        if self._sweeper is None:
            self._sweeper = threading.Thread(target=self._sweep_forever, name='link-cache-sweeper', daemon=True)
            self._sweeper.start()
        return self._sweeper

    def _sweep_forever(self) -> None:
        while True:
            time.sleep(self.settings.sweep_interval)
            removed = self.expire()
            logger.debug('Swept expired cache entries.', extra={'removed': removed, 'remaining': len(self)})
