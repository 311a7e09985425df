"""Result types for sandbox validation."""

from dataclasses import dataclass
from enum import Enum


class ViolationKind(Enum):
    """Why a patch target was rejected, in check order."""

    MISSING_IDENTITY = "missing_identity"
    DISALLOWED_TARGET = "disallowed_target"
    DISALLOWED_ROOT = "disallowed_root"
    PATH_TRAVERSAL = "path_traversal"
    RESTRICTED_PATH = "restricted_path"
    OUTSIDE_ROOT = "outside_root"


@dataclass(frozen=True)
class SandboxViolation:
    """Structured validation failure."""

    kind: ViolationKind
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a patch target.

    Attributes:
        allowed: True if every check passed
        absolute_path: Normalized absolute target path (set when allowed)
        normalized_path: Normalized path relative to the root (set when allowed)
        violation: The first failing check, if any
    """

    allowed: bool
    absolute_path: str | None = None
    normalized_path: str | None = None
    violation: SandboxViolation | None = None
