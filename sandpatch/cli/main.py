"""Entry point for the sandpatch CLI."""

import asyncio
import logging

from sandpatch.cli.arg_parser import build_parser
from sandpatch.cli.commands import (
    cmd_apply,
    cmd_check,
    cmd_infer,
    cmd_policy_check_identity,
    cmd_policy_check_path,
    cmd_policy_show,
)
from sandpatch.core.log_setup import configure_logging


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.command == "check":
        return cmd_check(args.diff_file, strict=args.strict)

    if args.command == "apply":
        return asyncio.run(
            cmd_apply(
                args.identity,
                args.root,
                args.path,
                args.diff_file,
                dry_run=args.dry_run,
                strict=args.strict,
                store=args.store,
                config_path=args.config,
            )
        )

    if args.command == "policy":
        if args.policy_command == "show":
            return cmd_policy_show(args.config)
        if args.policy_command == "check-identity":
            return cmd_policy_check_identity(args.identity, args.config)
        if args.policy_command == "check-path":
            return cmd_policy_check_path(args.identity, args.root, args.path, args.config)
        print("Usage: sandpatch policy <command>")
        print("Commands: show, check-identity, check-path")
        return 1

    if args.command == "infer":
        return cmd_infer(args.name)

    parser.print_help()
    return 1


def run() -> None:
    """Console script wrapper."""
    raise SystemExit(main())


if __name__ == "__main__":
    run()
