"""Content store for files on the local host.

Paths are re-checked after symlink resolution, so a link inside the sandbox
root that points elsewhere is refused even though the lexical validation
passed. Content is handed to the patch engine with LF line endings and
written back with the file's original line ending.
"""

import asyncio
import logging
import stat
from pathlib import Path

from sandpatch.core.paths import (
    atomic_write_bytes,
    detect_line_ending,
    resolve_within_root,
    restore_line_ending,
    to_lf,
)
from sandpatch.sandbox.policy import PatchTarget

logger = logging.getLogger(__name__)


class LocalFileStore:
    """ContentProvider and ContentWriter backed by the local filesystem."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    def _path_for(self, target: PatchTarget) -> Path:
        return resolve_within_root(target.relative_path, Path(target.root_directory))

    def _read_sync(self, target: PatchTarget) -> str:
        path = self._path_for(target)
        raw = path.read_bytes()
        # Strict decoding: binary files are not patchable
        return to_lf(raw.decode(self._encoding))

    def _write_sync(self, target: PatchTarget, content: str) -> None:
        path = self._path_for(target)
        line_ending = "\n"
        mode: int | None = None
        if path.exists():
            existing = path.read_bytes().decode(self._encoding, errors="replace")
            line_ending = detect_line_ending(existing)
            mode = stat.S_IMODE(path.stat().st_mode)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)

        data = restore_line_ending(content, line_ending).encode(self._encoding)
        atomic_write_bytes(path, data, mode=mode)
        logger.debug("Wrote %d bytes to %s", len(data), path)

    async def read(self, target: PatchTarget) -> str:
        """Read the target file as LF-normalized text.

        Raises:
            PathSecurityError: If the resolved path escapes the root.
            OSError: If the file cannot be read.
            UnicodeDecodeError: If the file is not valid text.
        """
        return await asyncio.to_thread(self._read_sync, target)

    async def write(self, target: PatchTarget, content: str) -> None:
        """Atomically replace the target file, keeping its line endings and mode.

        Raises:
            PathSecurityError: If the resolved path escapes the root.
            OSError: If the file cannot be written.
        """
        await asyncio.to_thread(self._write_sync, target, content)
