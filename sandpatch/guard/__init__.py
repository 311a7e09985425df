"""Helpers for embedding systems: call de-duplication and per-target locks."""

from sandpatch.guard.dedup import CacheEntry, CallDeduplicator, is_rate_limited, prune_expired
from sandpatch.guard.locks import TargetLocks, target_key

__all__ = [
    "CacheEntry",
    "CallDeduplicator",
    "TargetLocks",
    "is_rate_limited",
    "prune_expired",
    "target_key",
]
