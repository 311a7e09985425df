"""Argument parsing for the sandpatch CLI."""

import argparse
from pathlib import Path


def add_config_arg(parser: argparse.ArgumentParser) -> None:
    """Add --config argument to a parser."""
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Config file (default: ~/.sandpatch/config.json merged with ./.sandpatch/config.json)",
    )


def add_target_args(parser: argparse.ArgumentParser) -> None:
    """Add --identity/--root/--path arguments to a parser."""
    parser.add_argument("--identity", default="", help="Target identity (container name)")
    parser.add_argument("--root", required=True, help="Sandbox root directory")
    parser.add_argument("--path", required=True, help="File path relative to the root")


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser."""
    parser = argparse.ArgumentParser(
        prog="sandpatch",
        description="Validate and apply unified diffs inside a sandbox",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    # sandpatch check DIFF_FILE
    check_parser = subparsers.add_parser(
        "check",
        help="Parse a diff and report its hunks without applying it",
    )
    check_parser.add_argument("diff_file", help="Diff file to check ('-' for stdin)")
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on hunk lines with an unknown prefix",
    )

    # sandpatch apply --identity ID --root DIR --path REL DIFF_FILE
    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply a diff to a sandboxed file",
    )
    add_target_args(apply_parser)
    apply_parser.add_argument("diff_file", help="Diff file to apply ('-' for stdin)")
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Validate and apply in memory without writing",
    )
    apply_parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on hunk lines with an unknown prefix",
    )
    apply_parser.add_argument(
        "--store",
        choices=["local", "container"],
        default=None,
        help="Content store backend (default: from config)",
    )
    add_config_arg(apply_parser)

    # sandpatch policy ...
    policy_parser = subparsers.add_parser(
        "policy",
        help="Inspect and check the security policy",
    )
    policy_subparsers = policy_parser.add_subparsers(dest="policy_command")

    show_parser = policy_subparsers.add_parser("show", help="Print the effective policy")
    add_config_arg(show_parser)

    identity_parser = policy_subparsers.add_parser(
        "check-identity",
        help="Check whether an identity is allowed",
    )
    identity_parser.add_argument("identity", help="Identity to check")
    add_config_arg(identity_parser)

    path_parser = policy_subparsers.add_parser(
        "check-path",
        help="Run the full target validation without touching any file",
    )
    add_target_args(path_parser)
    add_config_arg(path_parser)

    # sandpatch infer NAME
    infer_parser = subparsers.add_parser(
        "infer",
        help="Infer a project identity from a container name",
    )
    infer_parser.add_argument("name", help="Container name")

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
