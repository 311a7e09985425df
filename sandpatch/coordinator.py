"""Patch coordination: validate -> parse -> read -> apply -> write.

The coordinator owns no state beyond its configuration. It performs at most
one read and one write through injected collaborators and short-circuits on
the first failure:

- validation and parse failures happen before any I/O
- the writer is never called unless the whole diff applied

Concurrent patches of the same target are not serialized here; the embedding
system must hold a per-target lock (see sandpatch.guard.locks) if it needs
that guarantee. There are no retries or timeouts; timeouts belong to the
collaborators.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from sandpatch.core.interfaces import AuditSink, ContentProvider, ContentWriter
from sandpatch.core.paths import detect_line_ending, restore_line_ending, to_lf
from sandpatch.patch.applier import apply_diff
from sandpatch.patch.parser import parse_diff
from sandpatch.patch.types import ParseFailure, PatchFailure
from sandpatch.sandbox.policy import PatchTarget, SecurityPolicy
from sandpatch.sandbox.types import SandboxViolation
from sandpatch.sandbox.validator import validate_target

logger = logging.getLogger(__name__)


class CoordinatorStage(Enum):
    """Pipeline stage at which a patch request failed."""

    VALIDATE = "validate"
    PARSE = "parse"
    READ = "read"
    APPLY = "apply"
    WRITE = "write"


@dataclass(frozen=True)
class IOFailure:
    """Opaque wrapper around a collaborator exception."""

    error_type: str
    message: str
    cause: BaseException | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "IOFailure":
        return cls(error_type=type(exc).__name__, message=str(exc), cause=exc)


Failure = SandboxViolation | ParseFailure | PatchFailure | IOFailure


@dataclass(frozen=True)
class CoordinatorError:
    """Failure of a patch request.

    Attributes:
        stage: Where the pipeline stopped
        failure: Structured failure from that stage
    """

    stage: CoordinatorStage
    failure: Failure

    @property
    def message(self) -> str:
        return f"{self.stage.value} failed: {self.failure.message}"


@dataclass(frozen=True)
class Confirmation:
    """Successful patch request.

    Attributes:
        identity: Target identity
        path: Normalized path relative to the root
        absolute_path: Normalized absolute path
        hunks: Number of hunks applied
        additions: Lines added
        removals: Lines removed
        dry_run: True if the writer was skipped
    """

    identity: str
    path: str
    absolute_path: str
    hunks: int
    additions: int
    removals: int
    dry_run: bool = False


@dataclass(frozen=True)
class PatchOutcome:
    """Result of PatchCoordinator.apply_patch()."""

    confirmation: Confirmation | None = None
    error: CoordinatorError | None = None
    new_content: str | None = None

    @property
    def success(self) -> bool:
        return self.confirmation is not None


def _fail(stage: CoordinatorStage, failure: Failure, target: PatchTarget) -> PatchOutcome:
    logger.warning(
        "Patch of %s:%s stopped at %s: %s",
        target.identity,
        target.relative_path,
        stage.value,
        failure.message,
    )
    return PatchOutcome(error=CoordinatorError(stage=stage, failure=failure))


class PatchCoordinator:
    """Orchestrates a single sandboxed patch request.

    Example:
        coordinator = PatchCoordinator(policy, audit=LoggingAuditSink())
        outcome = await coordinator.apply_patch(target, diff_text, store, store)
        if not outcome.success:
            print(outcome.error.message)
    """

    def __init__(
        self,
        policy: SecurityPolicy,
        *,
        audit: AuditSink | None = None,
        strict_parse: bool = False,
    ) -> None:
        self._policy = policy
        self._audit = audit
        self._strict_parse = strict_parse

    @property
    def policy(self) -> SecurityPolicy:
        return self._policy

    async def apply_patch(
        self,
        target: PatchTarget,
        diff_text: str,
        provider: ContentProvider,
        writer: ContentWriter,
        audit: AuditSink | None = None,
        *,
        dry_run: bool = False,
    ) -> PatchOutcome:
        """Validate, parse, read, apply and write one diff.

        Args:
            target: Requested target (identity, root, untrusted relative path)
            diff_text: Single-file unified diff text
            provider: Reads the current content
            writer: Persists the patched content
            audit: Audit sink for this call (defaults to the coordinator's)
            dry_run: Stop after a successful apply without writing

        Returns:
            PatchOutcome with a Confirmation, or a CoordinatorError naming the
            stage that failed. Never raises for collaborator failures.
        """
        sink: Any = audit if audit is not None else self._audit

        validation = validate_target(target, self._policy, sink)
        if not validation.allowed:
            assert validation.violation is not None
            return _fail(CoordinatorStage.VALIDATE, validation.violation, target)

        parsed = parse_diff(diff_text, strict=self._strict_parse)
        if parsed.document is None:
            assert parsed.error is not None
            return _fail(CoordinatorStage.PARSE, parsed.error, target)
        document = parsed.document

        # Collaborators only ever see the normalized path
        assert validation.normalized_path is not None
        resolved = replace(target, relative_path=validation.normalized_path)

        try:
            original = await provider.read(resolved)
        except Exception as e:
            return _fail(CoordinatorStage.READ, IOFailure.from_exception(e), target)

        # Diff lines are LF-split, so match against LF text and hand the
        # writer content in the provider's line ending
        line_ending = detect_line_ending(original)
        applied = apply_diff(to_lf(original), document)
        if not applied.success:
            assert applied.error is not None
            return _fail(CoordinatorStage.APPLY, applied.error, target)
        new_content = restore_line_ending(applied.new_content, line_ending)

        if not dry_run:
            try:
                await writer.write(resolved, new_content)
            except Exception as e:
                return _fail(CoordinatorStage.WRITE, IOFailure.from_exception(e), target)

        stats = document.stats()
        confirmation = Confirmation(
            identity=target.identity,
            path=resolved.relative_path,
            absolute_path=validation.absolute_path or "",
            hunks=len(document.hunks),
            additions=stats.additions,
            removals=stats.deletions,
            dry_run=dry_run,
        )
        logger.debug(
            "Patched %s:%s (%d hunk(s), +%d -%d%s)",
            confirmation.identity,
            confirmation.path,
            confirmation.hunks,
            confirmation.additions,
            confirmation.removals,
            ", dry run" if dry_run else "",
        )
        return PatchOutcome(confirmation=confirmation, new_content=new_content)
