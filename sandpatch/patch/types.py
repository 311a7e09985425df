"""Types for unified diff representation and patch results.

This module provides immutable dataclasses for a parsed diff document and the
result types returned by the parser and applier. Failures are values, not
exceptions: callers inspect `success` and the attached failure.
"""

from dataclasses import dataclass, field
from enum import Enum


class LineKind(Enum):
    """Kind of a line inside a hunk body."""

    CONTEXT = " "  # unchanged, must match the document
    ADD = "+"  # inserted
    REMOVE = "-"  # deleted, must match the document


@dataclass(frozen=True)
class DiffLine:
    """A single classified hunk body line (prefix stripped)."""

    kind: LineKind
    content: str


@dataclass(frozen=True)
class Hunk:
    """A single hunk in a unified diff.

    Attributes:
        old_start: Line number in the original document (1-indexed)
        old_count: Declared number of original lines (context + removed)
        new_start: Line number in the new document (1-indexed)
        new_count: Declared number of new lines (context + added)
        lines: Classified body lines, in order
        section: Optional function/class context text after the closing @@

    The declared counts are informational. The applier walks `lines` and never
    trusts the header counts.
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[DiffLine, ...]
    section: str = ""

    def count_removals(self) -> int:
        """Count lines being removed."""
        return sum(1 for line in self.lines if line.kind is LineKind.REMOVE)

    def count_additions(self) -> int:
        """Count lines being added."""
        return sum(1 for line in self.lines if line.kind is LineKind.ADD)

    def count_context(self) -> int:
        """Count context lines."""
        return sum(1 for line in self.lines if line.kind is LineKind.CONTEXT)

    def compute_counts(self) -> tuple[int, int]:
        """Compute actual (old_count, new_count) from the body lines.

        old_count = context + removals, new_count = context + additions.
        """
        context = self.count_context()
        return (context + self.count_removals(), context + self.count_additions())

    def counts_match(self) -> bool:
        """Whether the header counts agree with the body lines."""
        return self.compute_counts() == (self.old_count, self.new_count)

    @property
    def header(self) -> str:
        """Canonical hunk header text."""
        return f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"


@dataclass(frozen=True)
class DiffStats:
    """Line change totals for a diff document."""

    additions: int
    deletions: int

    @property
    def changes(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class DiffDocument:
    """A parsed single-file unified diff.

    Only produced by a successful parse, so `hunks` is never empty and no
    hunk has an empty body. Applying the same document twice is expected to
    fail the second time: diffs are not idempotent.

    Attributes:
        hunks: Hunks in document order
        source_label: Label from the `--- ` header, if present
        target_label: Label from the `+++ ` header, if present
    """

    hunks: tuple[Hunk, ...]
    source_label: str | None = None
    target_label: str | None = None

    def stats(self) -> DiffStats:
        """Total additions and deletions across all hunks."""
        return DiffStats(
            additions=sum(h.count_additions() for h in self.hunks),
            deletions=sum(h.count_removals() for h in self.hunks),
        )

    @property
    def line_delta(self) -> int:
        """Net change in line count once the document is applied."""
        stats = self.stats()
        return stats.additions - stats.deletions


class ParseErrorKind(Enum):
    """Reasons a diff text can fail to parse."""

    EMPTY_DIFF = "empty_diff"
    EMPTY_HUNK = "empty_hunk"
    MALFORMED_LINE = "malformed_line"  # strict mode only


@dataclass(frozen=True)
class ParseFailure:
    """Structured parse failure.

    Attributes:
        kind: What went wrong
        message: Human-readable description
        line_number: 1-based line in the diff text, when one applies
        hunk_index: 0-based hunk index, when one applies
        line: Offending diff text line, when one applies
    """

    kind: ParseErrorKind
    message: str
    line_number: int | None = None
    hunk_index: int | None = None
    line: str | None = None


@dataclass(frozen=True)
class ParseResult:
    """Result of parsing diff text: either a document or a failure."""

    document: DiffDocument | None = None
    error: ParseFailure | None = None

    @property
    def success(self) -> bool:
        return self.document is not None


class PatchErrorKind(Enum):
    """Reasons a document can fail to apply."""

    CONTEXT_MISMATCH = "context_mismatch"
    REMOVE_MISMATCH = "remove_mismatch"


@dataclass(frozen=True)
class PatchFailure:
    """Structured apply failure.

    Attributes:
        kind: Context or removal mismatch
        line_number: 1-based line in the evolving buffer where the check failed
        expected: Content the diff expected
        actual: Content found, or "<EOF>" past the end of the document
        hunk_index: 0-based index of the hunk that failed
    """

    kind: PatchErrorKind
    line_number: int
    expected: str
    actual: str
    hunk_index: int

    @property
    def message(self) -> str:
        what = "context mismatch" if self.kind is PatchErrorKind.CONTEXT_MISMATCH else "removal mismatch"
        return (
            f"Hunk {self.hunk_index + 1}: {what} at line {self.line_number}: "
            f"expected {self.expected!r} but found {self.actual!r}"
        )


@dataclass(frozen=True)
class ApplyResult:
    """Result of applying a document.

    Attributes:
        success: True if every hunk applied
        new_content: Patched content, or the untouched original on failure
        error: The first mismatch, if any
        applied_hunks: Indices of hunks applied before success or failure
    """

    success: bool
    new_content: str
    error: PatchFailure | None = None
    applied_hunks: tuple[int, ...] = field(default_factory=tuple)
