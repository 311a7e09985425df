"""Path normalization, containment checks and atomic writes."""

import os
import posixpath
import tempfile
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path, PurePosixPath

from sandpatch.core.errors import PathSecurityError


def to_posix(path: str) -> str:
    """Convert Windows-style separators to forward slashes."""
    return path.replace("\\", "/")


def normalize_posix(path: str) -> str:
    """Normalize a POSIX path lexically (collapse `.`, `..` and duplicate slashes).

    No filesystem access is performed, so this works for paths that only exist
    inside a container.
    """
    normalized = posixpath.normpath(to_posix(path))
    # normpath keeps a leading "//" per POSIX; treat it as a single root
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def posix_is_within(path: str, prefix: str) -> bool:
    """Check whether `path` equals `prefix` or lies below it.

    Comparison is by path component, so `/app` contains `/app/src` but not
    `/application`. Both arguments are normalized first.
    """
    candidate = PurePosixPath(normalize_posix(path))
    base = PurePosixPath(normalize_posix(prefix))
    return candidate == base or base in candidate.parents


class _DecisionReason(Enum):
    ALLOWED_WITHIN_ROOT = auto()
    DENIED_OUTSIDE_ROOT = auto()
    DENIED_RESOLUTION_FAILED = auto()


@dataclass(frozen=True)
class _PathDecision:
    allowed: bool
    resolved_path: Path | None
    reason: _DecisionReason
    detail: str
    original_path: str


def _decide_path(path: str | Path, root: Path) -> _PathDecision:
    """Resolve `path` against `root` (following symlinks) and check containment."""
    original = str(path)

    if isinstance(path, str):
        path = Path(to_posix(path))

    candidate = path if path.is_absolute() else root / path

    try:
        resolved = candidate.resolve()
        root_resolved = root.resolve()
    except (OSError, ValueError) as e:
        return _PathDecision(
            allowed=False,
            resolved_path=None,
            reason=_DecisionReason.DENIED_RESOLUTION_FAILED,
            detail=f"Cannot resolve path: {e}",
            original_path=original,
        )

    if not resolved.is_relative_to(root_resolved):
        return _PathDecision(
            allowed=False,
            resolved_path=None,
            reason=_DecisionReason.DENIED_OUTSIDE_ROOT,
            detail=f"Resolved path escapes root: {root}",
            original_path=original,
        )

    return _PathDecision(
        allowed=True,
        resolved_path=resolved,
        reason=_DecisionReason.ALLOWED_WITHIN_ROOT,
        detail=f"Path within root: {root}",
        original_path=original,
    )


def resolve_within_root(path: str | Path, root: Path) -> Path:
    """Resolve a path on the local host and confirm it stays inside `root`.

    Unlike the lexical checks done by the sandbox validator, this follows
    symlinks, so a link inside the root that points outside it is rejected.

    Args:
        path: Path to check (relative paths are resolved against `root`).
        root: Sandbox root directory.

    Returns:
        Resolved absolute path.

    Raises:
        PathSecurityError: If the path cannot be resolved or escapes `root`.
    """
    decision = _decide_path(path, root)
    if not decision.allowed:
        raise PathSecurityError(decision.original_path, decision.detail)

    assert decision.resolved_path is not None
    return decision.resolved_path


def detect_line_ending(content: str) -> str:
    """Detect the predominant line ending style in content.

    Returns:
        "\\r\\n" (CRLF - Windows), "\\n" (LF - Unix), "\\r" (CR - legacy)
    """
    if "\r\n" in content:
        return "\r\n"
    elif "\r" in content:
        return "\r"
    return "\n"


def to_lf(content: str) -> str:
    """Convert CRLF and CR line endings to LF."""
    return content.replace("\r\n", "\n").replace("\r", "\n")


def restore_line_ending(content: str, line_ending: str) -> str:
    """Convert LF content back to the given line ending."""
    if line_ending == "\n":
        return content
    return to_lf(content).replace("\n", line_ending)


def atomic_write_bytes(path: Path, data: bytes, mode: int | None = None) -> None:
    """Write bytes to a file atomically using temp file + rename.

    The temp file is created in the same directory so the rename stays on one
    filesystem. The file is never left in a partial state. When `mode` is
    given the new file gets those permission bits (mkstemp creates 0600).

    Raises:
        OSError: If the file cannot be written.
    """
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, str(path))
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
