"""
Process-wide query cache keyed by (resource, user_id), and the registry of in-flight mutations.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Hashable, Optional, Set, Tuple

from contactbook.core.config import get_settings
from contactbook.core.errors import SubmissionPending

logger = logging.getLogger(__name__)

CacheKey = Tuple[Hashable, ...]

_MISSING = object()


class QueryCache:
    def __init__(self, ttl_seconds: Optional[float] = None) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[CacheKey, Tuple[float, Any]] = {}

    def get(self, key: CacheKey, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        stored_at, value = entry
        if self.ttl_seconds is not None and time.monotonic() - stored_at > self.ttl_seconds:
            del self._entries[key]
            return default
        return value

    def __contains__(self, key: CacheKey) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = (time.monotonic(), value)

    def invalidate(self, key: CacheKey) -> None:
        """Drop a cached query; the next read fetches fresh data."""
        if self._entries.pop(key, None) is not None:
            logger.debug("Invalidated %s", key)

    def clear(self) -> None:
        self._entries.clear()


class MutationGuard:
    """Refuses a mutation while the same one is still running for the same user."""

    def __init__(self) -> None:
        self._pending: Set[CacheKey] = set()

    def is_pending(self, key: CacheKey) -> bool:
        return key in self._pending

    @asynccontextmanager
    async def hold(self, key: CacheKey) -> AsyncIterator[None]:
        if key in self._pending:
            logger.warning("Rejected duplicate submission %s", key)
            raise SubmissionPending(str(key[0]))
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)


_query_cache: Optional[QueryCache] = None
_mutation_guard: Optional[MutationGuard] = None


def get_query_cache() -> QueryCache:
    global _query_cache
    if _query_cache is None:
        _query_cache = QueryCache(ttl_seconds=get_settings().query_cache_ttl_seconds)
    return _query_cache


def get_mutation_guard() -> MutationGuard:
    global _mutation_guard
    if _mutation_guard is None:
        _mutation_guard = MutationGuard()
    return _mutation_guard
