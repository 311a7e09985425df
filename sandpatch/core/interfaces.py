"""Core interfaces (protocols) for sandpatch collaborators.

The coordinator depends only on these Protocols, so any storage backend
(local filesystem, container, remote store) can be injected without
inheritance.
"""

from typing import Protocol

from sandpatch.sandbox.audit import AuditEvent
from sandpatch.sandbox.policy import PatchTarget


class ContentProvider(Protocol):
    """Fetches the current content of a patch target.

    Example:
        class DictStore:
            async def read(self, target: PatchTarget) -> str:
                return self.files[target.relative_path]
    """

    async def read(self, target: PatchTarget) -> str:
        """Return the target's current text content.

        Any line ending is accepted. The coordinator applies the diff to an
        LF-normalized copy and gives the writer content using the line ending
        detected here (CRLF wins if present anywhere).

        Raises:
            Exception: Any failure (not found, access denied, transient fault).
                The coordinator wraps it into a READ stage error.
        """
        ...


class ContentWriter(Protocol):
    """Persists new content for a patch target."""

    async def write(self, target: PatchTarget, content: str) -> None:
        """Replace the target's content.

        Raises:
            Exception: Any failure. The coordinator wraps it into a WRITE
                stage error.
        """
        ...


class AuditSink(Protocol):
    """Receives validation audit events (fire-and-forget)."""

    def record(self, event: AuditEvent) -> None:
        ...
