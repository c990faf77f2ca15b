"""In-memory TTL cache for assembled portfolio views.

One instance is created by the application entrypoint and injected into the
services that use it. Values are deep-copied on the way in and on the way out,
so cached data is never shared with a live request.
"""

import copy
import logging
import time
from dataclasses import dataclass
from typing import Any

from model_tracker.config import settings

logger = logging.getLogger(__name__)

COMBINED_ACCOUNTS = "combined-accounts"
MODEL_WATCH_LIST = "model-watch-list"
PORTFOLIO_COMMENTARY = "portfolio-commentary"


def cache_key(kind: str, day: str) -> str:
    """cache_key("combined-accounts", "2025-06-02") -> "combined-accounts-2025-06-02"."""
    return f"{kind}-{day}"


@dataclass
class CacheEntry:
    data: Any
    stored_at: float
    expires_at: float


class CacheService:
    """Key/value store with per-entry expiry."""

    def __init__(self, default_ttl: int | None = None, email_ttl: int | None = None, clock=time.monotonic):
        self.default_ttl = settings.cache_default_ttl_seconds if default_ttl is None else default_ttl
        self.email_ttl = settings.cache_email_ttl_seconds if email_ttl is None else email_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Return a copy of the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss: {key}")
            return None

        if self._clock() > entry.expires_at:
            logger.debug(f"Cache expired: {key}")
            del self._entries[key]
            return None

        logger.debug(f"Cache hit: {key}")
        return copy.deepcopy(entry.data)

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        if ttl is None:
            ttl = self.default_ttl
        now = self._clock()
        self._entries[key] = CacheEntry(data=copy.deepcopy(value), stored_at=now, expires_at=now + ttl)
        logger.debug(f"Cache set: {key}, TTL: {ttl}s")

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._clock() <= entry.expires_at

    def clear(self, key: str) -> None:
        self._entries.pop(key, None)
        logger.info(f"Cleared cache for key: {key}")

    def clear_all(self) -> None:
        self._entries.clear()
        logger.info("Cleared all cache")

    def stats(self) -> dict[str, Any]:
        return {"size": len(self._entries), "keys": list(self._entries)}

    # Typed helpers for the cached portfolio views

    def get_combined_accounts(self, day: str) -> Any | None:
        return self.get(cache_key(COMBINED_ACCOUNTS, day))

    def set_combined_accounts(self, day: str, data: Any) -> None:
        self.set(cache_key(COMBINED_ACCOUNTS, day), data, self.email_ttl)

    def get_model_watch_list(self, day: str) -> Any | None:
        return self.get(cache_key(MODEL_WATCH_LIST, day))

    def set_model_watch_list(self, day: str, data: Any) -> None:
        self.set(cache_key(MODEL_WATCH_LIST, day), data, self.email_ttl)

    def get_portfolio_commentary(self, day: str) -> Any | None:
        return self.get(cache_key(PORTFOLIO_COMMENTARY, day))

    def set_portfolio_commentary(self, day: str, data: Any) -> None:
        self.set(cache_key(PORTFOLIO_COMMENTARY, day), data)
