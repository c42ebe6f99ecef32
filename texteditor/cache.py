"""Short-lived key/value cache for preview link tokens.

The editor records ``filesalt_<secret path> -> share token`` here so the
preview endpoint can find out which token signed a link.
"""

import time
from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, Optional, Tuple


class LinkCache(ABC):
    @abstractmethod
    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Value stored under *key*, or ``None`` once it has expired."""


class MemoryLinkCache(LinkCache):
    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = Lock()

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        now = time.time()
        with self._lock:
            self._evict(now)
            self._entries[key] = (value, now + ttl_seconds)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value, deadline = self._entries.get(key, (None, 0.0))
            if value is not None and time.time() > deadline:
                self._entries.pop(key)
                return None
            return value

    def _evict(self, now: float) -> None:
        # lock held by caller
        stale = [key for key, (_, deadline) in self._entries.items() if now > deadline]
        for key in stale:
            del self._entries[key]
