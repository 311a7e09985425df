"""Subcommand implementations for the sandpatch CLI.

Each function prints to the shared rich console and returns an exit code.
"""

import sys
from pathlib import Path

from rich.markup import escape as rich_escape

from sandpatch.cli.output import console, print_error, print_info, print_success
from sandpatch.config.loader import load_config
from sandpatch.config.schema import Config
from sandpatch.coordinator import PatchCoordinator
from sandpatch.core.errors import ConfigError
from sandpatch.io.container import ContainerFileStore
from sandpatch.io.local import LocalFileStore
from sandpatch.patch.parser import parse_diff
from sandpatch.sandbox.audit import LoggingAuditSink
from sandpatch.sandbox.identity import infer_identity
from sandpatch.sandbox.policy import PatchTarget
from sandpatch.sandbox.validator import identity_matches, validate_target


def _read_diff(diff_file: str) -> str | None:
    """Read diff text from a file or stdin ('-'); prints an error on failure."""
    if diff_file == "-":
        return sys.stdin.read()
    try:
        return Path(diff_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print_error(f"Cannot read diff file {rich_escape(diff_file)}: {rich_escape(str(e))}")
        return None


def _load(config_path: Path | None) -> Config | None:
    try:
        return load_config(config_path)
    except ConfigError as e:
        print_error(rich_escape(e.message))
        return None


def _store_for(config: Config, backend: str) -> LocalFileStore | ContainerFileStore:
    if backend == "container":
        return ContainerFileStore(
            docker_binary=config.store.docker_binary,
            timeout=config.store.exec_timeout,
        )
    return LocalFileStore()


def cmd_check(diff_file: str, strict: bool = False) -> int:
    """Parse a diff and print its labels, hunks and totals."""
    text = _read_diff(diff_file)
    if text is None:
        return 1

    result = parse_diff(text, strict=strict)
    if result.document is None:
        assert result.error is not None
        print_error(f"Invalid diff ({result.error.kind.value}): {rich_escape(result.error.message)}")
        return 1

    document = result.document
    if document.source_label is not None:
        console.print(f"source: {rich_escape(document.source_label)}")
    if document.target_label is not None:
        console.print(f"target: {rich_escape(document.target_label)}")

    for index, hunk in enumerate(document.hunks, start=1):
        line = f"  hunk {index}: {hunk.header}"
        if not hunk.counts_match():
            old_count, new_count = hunk.compute_counts()
            line += f" [yellow](body has -{old_count},+{new_count})[/yellow]"
        console.print(line)

    stats = document.stats()
    print_success(
        f"Diff OK: {len(document.hunks)} hunk(s), "
        f"+{stats.additions} -{stats.deletions} ({stats.changes} changes)"
    )
    return 0


async def cmd_apply(
    identity: str,
    root: str,
    path: str,
    diff_file: str,
    *,
    dry_run: bool | None = None,
    strict: bool | None = None,
    store: str | None = None,
    config_path: Path | None = None,
) -> int:
    """Apply a diff through the coordinator. CLI flags override config values."""
    config = _load(config_path)
    if config is None:
        return 1

    text = _read_diff(diff_file)
    if text is None:
        return 1

    audit = LoggingAuditSink(config.audit.logger_name) if config.audit.enabled else None
    coordinator = PatchCoordinator(
        config.security.to_policy(),
        audit=audit,
        strict_parse=config.patch.strict_parse if strict is None else strict,
    )
    content_store = _store_for(config, store or config.store.backend)
    target = PatchTarget(identity=identity, root_directory=root, relative_path=path)

    outcome = await coordinator.apply_patch(
        target,
        text,
        content_store,
        content_store,
        dry_run=config.patch.dry_run if dry_run is None else dry_run,
    )

    if outcome.confirmation is None:
        assert outcome.error is not None
        print_error(rich_escape(outcome.error.message))
        print_info("No changes made.")
        return 1

    confirmation = outcome.confirmation
    verb = "Would apply" if confirmation.dry_run else "Applied"
    print_success(
        f"{verb} {confirmation.hunks} hunk(s) to {rich_escape(confirmation.absolute_path)} "
        f"(+{confirmation.additions} -{confirmation.removals})"
    )
    return 0


def cmd_policy_show(config_path: Path | None = None) -> int:
    """Print the effective security policy."""
    config = _load(config_path)
    if config is None:
        return 1

    security = config.security
    console.print("[bold]Security policy[/bold]")
    console.print(f"  require_identity: {security.require_identity}")
    for title, values in (
        ("allowed_identity_patterns", security.allowed_identity_patterns),
        ("allowed_roots", security.allowed_roots),
        ("restricted_prefixes", security.restricted_prefixes),
    ):
        console.print(f"  {title}:")
        for value in values:
            console.print(f"    - {rich_escape(value)}")
    return 0


def cmd_policy_check_identity(identity: str, config_path: Path | None = None) -> int:
    """Report whether an identity matches the allowed patterns."""
    config = _load(config_path)
    if config is None:
        return 1

    patterns = config.security.allowed_identity_patterns
    matched = [p for p in patterns if identity_matches(identity, p)]
    if matched:
        print_success(f"{rich_escape(identity)} is allowed (matches {rich_escape(matched[0])})")
        return 0
    print_error(f"{rich_escape(identity)} is not in the allowed list")
    return 1


def cmd_policy_check_path(
    identity: str, root: str, path: str, config_path: Path | None = None
) -> int:
    """Run the full target validation and report the verdict."""
    config = _load(config_path)
    if config is None:
        return 1

    target = PatchTarget(identity=identity, root_directory=root, relative_path=path)
    result = validate_target(target, config.security.to_policy())
    if result.allowed:
        print_success(f"Allowed: {rich_escape(result.absolute_path or '')}")
        return 0

    assert result.violation is not None
    print_error(f"{result.violation.kind.value}: {rich_escape(result.violation.message)}")
    return 1


def cmd_infer(name: str) -> int:
    """Print the identity inferred from a container name."""
    identity = infer_identity(name)
    if identity is None:
        print_error(f"No identity rule matches {rich_escape(name)}")
        return 1
    console.print(identity)
    return 0
