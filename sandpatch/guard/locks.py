"""Per-target locks for embedding systems that need serialized patches.

The coordinator does not serialize concurrent patches of the
same target. An embedding system that runs several agent tasks at once can
wrap each apply_patch() call in `async with locks.hold(target):`.
"""

import asyncio
import posixpath
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sandpatch.core.paths import normalize_posix
from sandpatch.sandbox.policy import PatchTarget


def target_key(target: PatchTarget) -> tuple[str, str]:
    """Lock key: the identity and the lexically normalized absolute path."""
    path = normalize_posix(posixpath.join(target.root_directory, target.relative_path))
    return (target.identity, path)


class TargetLocks:
    """Registry of asyncio locks keyed by identity and normalized path.

    Locks are created on demand and dropped once no task holds or waits on
    them, so the registry does not grow without bound.
    """

    def __init__(self) -> None:
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._waiters: dict[tuple[str, str], int] = {}

    @asynccontextmanager
    async def hold(self, target: PatchTarget) -> AsyncIterator[None]:
        key = target_key(target)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
