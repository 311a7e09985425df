"""Time-boxed de-duplication of repeated calls.

Agent loops sometimes fire the same tool call several times in quick
succession. This collaborator lets the embedding system answer "was this
exact call made within the last N seconds?" without any global state: the
entry map lives on an explicit CallDeduplicator instance and the decisions
are pure functions over that map.
"""

import time
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A remembered call result and when it stops counting."""

    value: Any
    expires_at: float


def is_rate_limited(entries: Mapping[Hashable, CacheEntry], key: Hashable, now: float) -> bool:
    """Whether `key` has an unexpired entry at time `now`."""
    entry = entries.get(key)
    return entry is not None and entry.expires_at > now


def prune_expired(entries: Mapping[Hashable, CacheEntry], now: float) -> dict[Hashable, CacheEntry]:
    """Return a copy of `entries` without expired items."""
    return {key: entry for key, entry in entries.items() if entry.expires_at > now}


class CallDeduplicator:
    """Holds recent call results for `ttl` seconds.

    Args:
        ttl: Seconds an entry suppresses repeats of the same key
        clock: Monotonic time source (injectable for tests)
    """

    def __init__(self, ttl: float = 5.0, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}

    def is_duplicate(self, key: Hashable) -> bool:
        return is_rate_limited(self._entries, key, self._clock())

    def get(self, key: Hashable) -> Any | None:
        """Cached value for an unexpired key, else None."""
        now = self._clock()
        if not is_rate_limited(self._entries, key, now):
            return None
        return self._entries[key].value

    def remember(self, key: Hashable, value: Any) -> None:
        now = self._clock()
        self._entries = prune_expired(self._entries, now)
        self._entries[key] = CacheEntry(value=value, expires_at=now + self._ttl)

    def __len__(self) -> int:
        return len(prune_expired(self._entries, self._clock()))
