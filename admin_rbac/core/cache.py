"""
Process-local permission cache.

Entries expire after a fixed TTL, checked lazily on lookup; there is no
background sweep. Entries for distinct users accumulate until they are
invalidated or the process restarts.
"""

import logging
import time
from typing import Callable, Dict, FrozenSet, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


class PermissionCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[FrozenSet[str], float]] = {}

    def get(self, key: Hashable) -> Optional[FrozenSet[str]]:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("Permission cache miss for %s", key)
            return None
        permissions, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            logger.debug("Permission cache entry expired for %s", key)
            return None
        logger.debug("Permission cache hit for %s", key)
        return permissions

    def set(self, key: Hashable, permissions) -> FrozenSet[str]:
        frozen = frozenset(permissions)
        self._entries[key] = (frozen, self._clock())
        return frozen

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
