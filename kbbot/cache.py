"""
In-memory cache of fetched article text, keyed by absolute article URL.
"""
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from kbbot.models import ArticleContent


class ArticleIndexCache:
    """
    Maps article URL to its normalized content.

    With the default arguments the cache never evicts and never expires, so
    it grows with every distinct article for the life of the process. Pass
    ``max_entries`` and/or ``ttl_seconds`` to bound it.

    Every get/put holds a lock, so searches running in different worker
    threads can share one instance.
    """

    def __init__(
        self,
        max_entries: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, tuple[ArticleContent, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def _expired(self, stored_at: float) -> bool:
        return self.ttl_seconds is not None and self._clock() - stored_at > self.ttl_seconds

    def get(self, url: str) -> Optional[ArticleContent]:
        with self._lock:
            entry = self._entries.get(url)
            if entry is None:
                return None
            content, stored_at = entry
            if self._expired(stored_at):
                del self._entries[url]
                return None
            return content

    def put(self, url: str, content: ArticleContent) -> ArticleContent:
        """Store *content* unless a live entry exists; return whichever is cached."""
        with self._lock:
            entry = self._entries.get(url)
            if entry is not None and not self._expired(entry[1]):
                return entry[0]
            self._entries[url] = (content, self._clock())
            self._entries.move_to_end(url)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)
            return content

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, url: str) -> bool:
        return self.get(url) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
