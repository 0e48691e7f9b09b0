"""Bounded response cache shared by every json_api processor of a plugin."""

import threading
from collections import OrderedDict
from typing import Any

from ingest_jsonapi.core.logging import get_logger


logger = get_logger(__name__)

DEFAULT_MAX_WEIGHT = 1000


class ResponseCache:
    """Thread-safe LRU cache mapping request URLs to response bodies.

    Holds at most ``max_weight`` entries; inserting beyond that evicts the
    least recently used entry. Entries never expire. A ``max_weight`` of 0
    disables caching: every lookup misses and nothing is stored.

    Concurrent misses for the same URL are not coalesced, so two threads
    may both fetch and store the same body.
    """

    def __init__(self, max_weight: int = DEFAULT_MAX_WEIGHT) -> None:
        if max_weight < 0:
            raise ValueError(f"max_weight must be >= 0, got {max_weight}")
        self._max_weight = max_weight
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def max_weight(self) -> int:
        return self._max_weight

    def get(self, url: str) -> str | None:
        """Return the cached body for ``url`` or None. Never fetches."""
        with self._lock:
            body = self._entries.get(url)
            if body is None:
                self._misses += 1
                return None
            self._entries.move_to_end(url)
            self._hits += 1
            return body

    def put(self, url: str, body: str) -> None:
        """Store ``body`` under ``url``, evicting the oldest entry when full."""
        if self._max_weight == 0:
            return

        with self._lock:
            self._entries[url] = body
            self._entries.move_to_end(url)
            while len(self._entries) > self._max_weight:
                evicted_url, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("json_api_cache_evicted", url=evicted_url)

    def invalidate(self, url: str) -> bool:
        """Remove ``url`` from the cache. Returns whether it was present."""
        with self._lock:
            return self._entries.pop(url, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "size": len(self._entries),
                "max_weight": self._max_weight,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries
