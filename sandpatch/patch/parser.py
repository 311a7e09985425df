"""Parser for single-file unified diff text.

This module turns diff text into an immutable DiffDocument. It never raises
for bad input; failures come back as a ParseResult carrying a ParseFailure.
"""

import re
from dataclasses import dataclass, field

from sandpatch.patch.types import (
    DiffDocument,
    DiffLine,
    Hunk,
    LineKind,
    ParseErrorKind,
    ParseFailure,
    ParseResult,
)

# Pattern for hunk header: @@ -old_start[,old_count] +new_start[,new_count] @@ [section]
HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")

# File header labels; an optional tab-separated timestamp is dropped
SOURCE_HEADER_RE = re.compile(r"^--- (.*?)(?:\t.*)?$")
TARGET_HEADER_RE = re.compile(r"^\+\+\+ (.*?)(?:\t.*)?$")

NO_NEWLINE_MARKER = "\\ No newline at end of file"

_PREFIX_KINDS = {
    "+": LineKind.ADD,
    "-": LineKind.REMOVE,
    " ": LineKind.CONTEXT,
}


@dataclass
class _OpenHunk:
    """Hunk under construction; frozen into a Hunk once finalized."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str
    header_line: int
    lines: list[DiffLine] = field(default_factory=list)

    def freeze(self) -> Hunk:
        return Hunk(
            old_start=self.old_start,
            old_count=self.old_count,
            new_start=self.new_start,
            new_count=self.new_count,
            lines=tuple(self.lines),
            section=self.section,
        )


def _split_lines(text: str) -> list[str]:
    """Split diff text into lines.

    A single trailing newline does not produce a trailing empty line (which
    would otherwise read as a blank context line). CRLF endings are accepted.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _open_hunk(match: re.Match[str], line_number: int) -> _OpenHunk:
    """Build an open hunk from a matched header.

    Counts default to 1 when omitted (e.g. `@@ -1 +1,2 @@`). A start of 0,
    which unified diffs use for insertions into an empty file, is clamped to 1
    so the cursor never goes negative.
    """
    return _OpenHunk(
        old_start=max(int(match.group(1)), 1),
        old_count=int(match.group(2)) if match.group(2) is not None else 1,
        new_start=max(int(match.group(3)), 1),
        new_count=int(match.group(4)) if match.group(4) is not None else 1,
        section=match.group(5).strip(),
        header_line=line_number,
    )


def _empty_hunk_failure(hunk: _OpenHunk, index: int) -> ParseFailure:
    return ParseFailure(
        kind=ParseErrorKind.EMPTY_HUNK,
        message=f"Hunk {index + 1} (line {hunk.header_line}) has no body lines",
        line_number=hunk.header_line,
        hunk_index=index,
    )


def _is_header_pair(lines: list[str], idx: int) -> bool:
    """Whether lines[idx:idx + 3] read `--- `, `+++ `, then a hunk header.

    Inside a hunk a `---`/`+++` pair is also what changing a `-- ` comment
    into a `++ ` or `-- ` line looks like, so the pair only counts as headers
    when a new hunk starts right after it.
    """
    return (
        lines[idx].startswith("--- ")
        and idx + 2 < len(lines)
        and lines[idx + 1].startswith("+++ ")
        and HUNK_HEADER_RE.match(lines[idx + 2]) is not None
    )


def parse_diff(text: str, *, strict: bool = False) -> ParseResult:
    """Parse unified diff text into a DiffDocument.

    Handles:
    - Optional `--- label` / `+++ label` headers (informational only)
    - Hunk headers `@@ -a[,b] +c[,d] @@`, counts defaulting to 1
    - Body lines prefixed with '+', '-' or ' '; an empty line is a blank
      context line (LLMs often drop the space prefix)
    - The '\\ No newline at end of file' marker, which is skipped

    Body lines with any other leading character are dropped by default. With
    `strict=True` they fail the parse with MALFORMED_LINE instead.

    Header counts are not cross-checked against the body; inconsistencies
    show up later as apply mismatches.

    Args:
        text: Diff text to parse
        strict: Reject unrecognized body lines instead of dropping them

    Returns:
        ParseResult with either `document` or `error` set.

    Example:
        >>> result = parse_diff("@@ -1,2 +1,2 @@\\n a\\n-b\\n+B\\n")
        >>> result.success
        True
        >>> result.document.stats().changes
        2
    """
    lines = _split_lines(text)
    source_label: str | None = None
    target_label: str | None = None
    hunks: list[Hunk] = []
    current: _OpenHunk | None = None
    in_header_pair = False

    for idx, line in enumerate(lines):
        line_number = idx + 1

        if line.startswith("@@"):
            match = HUNK_HEADER_RE.match(line)
            if match:
                if current is not None:
                    if not current.lines:
                        return ParseResult(error=_empty_hunk_failure(current, len(hunks)))
                    hunks.append(current.freeze())
                current = _open_hunk(match, line_number)
                in_header_pair = False
                continue

        # Headers: anywhere before the first hunk, or as a ---/+++ pair later
        if line.startswith("--- ") and (current is None or _is_header_pair(lines, idx)):
            header = SOURCE_HEADER_RE.match(line)
            if header:
                source_label = header.group(1).strip()
            in_header_pair = current is not None
            continue
        if line.startswith("+++ ") and (current is None or in_header_pair):
            header = TARGET_HEADER_RE.match(line)
            if header:
                target_label = header.group(1).strip()
            in_header_pair = False
            continue

        if current is None:
            # Preamble such as "diff --git" or "index" lines
            continue

        if line.startswith(NO_NEWLINE_MARKER):
            continue

        if line == "":
            current.lines.append(DiffLine(LineKind.CONTEXT, ""))
            continue

        kind = _PREFIX_KINDS.get(line[0])
        if kind is not None:
            current.lines.append(DiffLine(kind, line[1:]))
        elif strict:
            return ParseResult(
                error=ParseFailure(
                    kind=ParseErrorKind.MALFORMED_LINE,
                    message=(
                        f"Line {line_number}: unrecognized prefix {line[0]!r} "
                        "(expected '+', '-' or ' ')"
                    ),
                    line_number=line_number,
                    hunk_index=len(hunks),
                    line=line,
                )
            )

    if current is None:
        return ParseResult(
            error=ParseFailure(
                kind=ParseErrorKind.EMPTY_DIFF,
                message="No hunk headers (@@ -a,b +c,d @@) found in diff",
            )
        )

    if not current.lines:
        return ParseResult(error=_empty_hunk_failure(current, len(hunks)))
    hunks.append(current.freeze())

    return ParseResult(
        document=DiffDocument(
            hunks=tuple(hunks),
            source_label=source_label,
            target_label=target_label,
        )
    )
