"""Applier for parsed diff documents.

Applies hunks in document order against a line buffer with exact matching.
The operation is atomic: on the first mismatch the original content is
returned untouched along with a structured PatchFailure.
"""

from sandpatch.core.constants import EOF_SENTINEL
from sandpatch.patch.types import (
    ApplyResult,
    DiffDocument,
    Hunk,
    LineKind,
    PatchErrorKind,
    PatchFailure,
)


def split_document(content: str) -> list[str]:
    """Split content on newlines.

    A trailing newline yields a final empty element, so joining the buffer
    back with "\\n" reproduces the trailing-newline state verbatim.
    """
    return content.split("\n")


def _mismatch(
    kind: PatchErrorKind,
    buffer: list[str],
    cursor: int,
    expected: str,
    hunk_index: int,
) -> PatchFailure:
    actual = buffer[cursor] if 0 <= cursor < len(buffer) else EOF_SENTINEL
    return PatchFailure(
        kind=kind,
        line_number=cursor + 1,
        expected=expected,
        actual=actual,
        hunk_index=hunk_index,
    )


def _apply_hunk(
    buffer: list[str], hunk: Hunk, offset: int, hunk_index: int
) -> tuple[int, PatchFailure | None]:
    """Apply one hunk to the buffer in place.

    Hunk line numbers refer to the original document, so the cursor starts at
    `old_start - 1` shifted by the cumulative `offset` of earlier hunks.

    Args:
        buffer: Live line buffer (modified in place)
        hunk: Hunk to apply
        offset: Net lines added by previous hunks
        hunk_index: Index of this hunk, for error reporting

    Returns:
        Tuple of (new_offset, failure_or_none)
    """
    cursor = hunk.old_start - 1 + offset

    for line in hunk.lines:
        if line.kind is LineKind.CONTEXT:
            if 0 <= cursor < len(buffer) and buffer[cursor] == line.content:
                cursor += 1
            else:
                return offset, _mismatch(
                    PatchErrorKind.CONTEXT_MISMATCH, buffer, cursor, line.content, hunk_index
                )
        elif line.kind is LineKind.REMOVE:
            if 0 <= cursor < len(buffer) and buffer[cursor] == line.content:
                # Next element shifts into place; cursor stays put
                del buffer[cursor]
                offset -= 1
            else:
                return offset, _mismatch(
                    PatchErrorKind.REMOVE_MISMATCH, buffer, cursor, line.content, hunk_index
                )
        else:
            buffer.insert(cursor, line.content)
            cursor += 1
            offset += 1

    return offset, None


def apply_diff(original: str, document: DiffDocument) -> ApplyResult:
    """Apply a parsed diff document to content.

    Every hunk must match exactly. If any hunk fails, nothing is applied and
    the original content is returned unchanged (whole-document atomicity).

    Args:
        original: Current document content
        document: Parsed diff from parse_diff()

    Returns:
        ApplyResult with the patched content on success, or the original
        content and the first PatchFailure on failure.

    Example:
        >>> from sandpatch.patch.parser import parse_diff
        >>> doc = parse_diff("@@ -1,3 +1,4 @@\\n a\\n-b\\n+B\\n+d\\n c").document
        >>> apply_diff("a\\nb\\nc", doc).new_content
        'a\\nB\\nd\\nc'
    """
    buffer = split_document(original)
    offset = 0
    applied: list[int] = []

    for index, hunk in enumerate(document.hunks):
        offset, failure = _apply_hunk(buffer, hunk, offset, index)
        if failure is not None:
            return ApplyResult(
                success=False,
                new_content=original,
                error=failure,
                applied_hunks=tuple(applied),
            )
        applied.append(index)

    return ApplyResult(
        success=True,
        new_content="\n".join(buffer),
        applied_hunks=tuple(applied),
    )
