"""
Time-bounded result cache for reasoning output.

One ResultCache instance is owned by the MatchOrchestrator and shared across
requests for the lifetime of the process. Entries expire a fixed TTL after
insertion and are removed lazily when a read finds them stale; there is no
background sweep.

Key layout:
    analyze:{creatorId}
    match:{entityId}-{limit}

invalidate_containing() drops every key that contains a substring, which is
how all cached results for one creator are purged after new sales arrive.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from creator_match.models import CacheOperation

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS: float = 300.0


def cache_key(operation: CacheOperation, entity_id: str, limit: Optional[int] = None) -> str:
    """
    Build a cache key for an operation and entity.

    Example:
        >>> cache_key(CacheOperation.ANALYZE, "creator-001")
        'analyze:creator-001'
        >>> cache_key(CacheOperation.MATCH, "creator-001", 10)
        'match:creator-001-10'
    """
    if limit is None:
        return f"{operation.value}:{entity_id}"
    return f"{operation.value}:{entity_id}-{limit}"


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class ResultCache:
    """
    In-memory TTL cache keyed by string.

    Args:
        ttl_seconds: Lifetime of each entry
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry[Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return None

        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl_seconds)

    def clear(self) -> None:
        self._entries.clear()

    def invalidate(self, predicate: Callable[[str], bool]) -> int:
        """
        Remove every entry whose key satisfies the predicate.

        Returns:
            Number of entries removed
        """
        doomed = [key for key in self._entries if predicate(key)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def invalidate_containing(self, fragment: str) -> int:
        """Remove every entry whose key contains the fragment."""
        return self.invalidate(lambda key: fragment in key)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
