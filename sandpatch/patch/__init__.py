"""Patch module for parsing and applying single-file unified diffs.

Main components:
- Types: DiffLine, Hunk, DiffDocument - immutable parsed diff
- Parser: parse_diff() - convert diff text to a DiffDocument
- Applier: apply_diff() - apply a document atomically with exact matching

Example usage:
    >>> from sandpatch.patch import parse_diff, apply_diff
    >>> diff_text = '''\\
    ... --- a/file.py
    ... +++ b/file.py
    ... @@ -1,3 +1,4 @@
    ...  line1
    ... -line2
    ... +new_line
    ... +another_line
    ...  line3
    ... '''
    >>> parsed = parse_diff(diff_text)
    >>> parsed.success
    True
    >>> result = apply_diff("line1\\nline2\\nline3\\n", parsed.document)
    >>> result.new_content
    'line1\\nnew_line\\nanother_line\\nline3\\n'
"""

from sandpatch.patch.applier import apply_diff
from sandpatch.patch.parser import parse_diff
from sandpatch.patch.types import (
    ApplyResult,
    DiffDocument,
    DiffLine,
    DiffStats,
    Hunk,
    LineKind,
    ParseErrorKind,
    ParseFailure,
    ParseResult,
    PatchErrorKind,
    PatchFailure,
)

__all__ = [
    # Types
    "DiffDocument",
    "DiffLine",
    "DiffStats",
    "Hunk",
    "LineKind",
    # Parser
    "ParseErrorKind",
    "ParseFailure",
    "ParseResult",
    "parse_diff",
    # Applier
    "ApplyResult",
    "PatchErrorKind",
    "PatchFailure",
    "apply_diff",
]
