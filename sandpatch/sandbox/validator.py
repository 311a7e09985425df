"""Sandbox validation for patch targets.

Checks run fail-fast in a fixed order and the first failing check wins:

1. identity present (when the policy requires one)
2. identity matches an allowed pattern
3. root directory under an allowed root
4. relative path does not traverse out of the root
5. absolute path not under a restricted prefix
6. absolute path under an allowed root (re-checked after normalization)

All checks are lexical (POSIX semantics, no filesystem access) so targets
inside containers can be validated from the host. Each call emits exactly one
audit event.
"""

import logging
import posixpath
import re
from typing import Any

from sandpatch.core.paths import normalize_posix, posix_is_within, to_posix
from sandpatch.sandbox.audit import AuditEvent, AuditVerdict, emit
from sandpatch.sandbox.policy import PatchTarget, SecurityPolicy
from sandpatch.sandbox.types import SandboxViolation, ValidationResult, ViolationKind

logger = logging.getLogger(__name__)


def _compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a literal-or-`*` pattern into an anchored regex.

    Only `*` is special; every other character matches itself.
    """
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile(".*".join(parts), re.DOTALL)


def identity_matches(identity: str, pattern: str) -> bool:
    """Check whether an identity fully matches a literal or `*` pattern."""
    return _compile_pattern(pattern).fullmatch(identity) is not None


def _within_any(path: str, prefixes: frozenset[str]) -> str | None:
    """Return the first prefix (in sorted order) containing `path`, if any."""
    for prefix in sorted(prefixes):
        if posix_is_within(path, prefix):
            return prefix
    return None


def _normalize_relative(relative_path: str, root: str) -> str | None:
    """Normalize a caller-supplied path to one relative to `root`.

    Returns None when the path escapes the root. An absolute path is accepted
    only if it already lies inside the root.
    """
    if not relative_path or "\x00" in relative_path:
        return None

    candidate = to_posix(relative_path)
    if candidate.startswith("/"):
        absolute = normalize_posix(candidate)
        if not posix_is_within(absolute, root):
            return None
        candidate = posixpath.relpath(absolute, root)

    normalized = normalize_posix(candidate)
    if normalized == ".." or normalized.startswith("../"):
        return None
    return normalized


def _check(target: PatchTarget, policy: SecurityPolicy) -> ValidationResult:
    identity = target.identity

    if policy.require_identity and not identity:
        return _deny(ViolationKind.MISSING_IDENTITY, "No target identity supplied")

    if identity and not any(
        identity_matches(identity, pattern) for pattern in policy.allowed_identity_patterns
    ):
        return _deny(
            ViolationKind.DISALLOWED_TARGET,
            f"Target '{identity}' is not in the allowed list",
        )

    root = normalize_posix(target.root_directory) if target.root_directory else ""
    if not root.startswith("/") or _within_any(root, policy.allowed_roots) is None:
        return _deny(
            ViolationKind.DISALLOWED_ROOT,
            f"Root directory '{target.root_directory}' is not an allowed root",
        )

    normalized = _normalize_relative(target.relative_path, root)
    if normalized is None:
        return _deny(
            ViolationKind.PATH_TRAVERSAL,
            f"Path '{target.relative_path}' escapes root '{root}'",
        )

    absolute = normalize_posix(posixpath.join(root, normalized))

    restricted = _within_any(absolute, policy.restricted_prefixes)
    if restricted is not None:
        return _deny(
            ViolationKind.RESTRICTED_PATH,
            f"Path '{absolute}' is under restricted prefix '{restricted}'",
        )

    if _within_any(absolute, policy.allowed_roots) is None:
        return _deny(
            ViolationKind.OUTSIDE_ROOT,
            f"Path '{absolute}' is outside the allowed roots",
        )

    return ValidationResult(allowed=True, absolute_path=absolute, normalized_path=normalized)


def _deny(kind: ViolationKind, message: str) -> ValidationResult:
    return ValidationResult(allowed=False, violation=SandboxViolation(kind, message))


def validate_target(
    target: PatchTarget,
    policy: SecurityPolicy,
    audit: Any = None,
) -> ValidationResult:
    """Validate a patch target against a security policy.

    Args:
        target: Requested mutation target
        policy: Security policy to enforce
        audit: Optional AuditSink; receives exactly one event per call

    Returns:
        ValidationResult; `violation` names the first failing check.

    Example:
        >>> policy = SecurityPolicy.build(["ai-sandbox-*"], ["/app"], ["/etc"])
        >>> validate_target(PatchTarget("random", "/app", "x.py"), policy).violation.kind
        <ViolationKind.DISALLOWED_TARGET: 'disallowed_target'>
    """
    result = _check(target, policy)

    if result.allowed:
        event = AuditEvent(
            identity=target.identity,
            path=result.absolute_path or target.relative_path,
            verdict=AuditVerdict.ALLOWED,
        )
    else:
        assert result.violation is not None
        logger.debug(
            "Rejected target %s:%s (%s)",
            target.identity,
            target.relative_path,
            result.violation.kind.value,
        )
        event = AuditEvent(
            identity=target.identity,
            path=target.relative_path,
            verdict=AuditVerdict.DENIED,
            reason=result.violation.kind,
            detail=result.violation.message,
        )

    emit(audit, event)
    return result
