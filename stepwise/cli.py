"""
Command-line interface for stepwise.

This module is responsible for argument parsing and delegating to the
branch, check and devshell operations.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .branches import update_branches
from .checker import check_all_commits, print_check_summary, write_check_report
from .config import (
    DEFAULT_CHECK_COMMAND,
    DEFAULT_PREFIX,
    DEFAULT_REMOTE,
    DEFAULT_START_BRANCHES,
    Config,
)
from .devshell import (
    DEFAULT_SHELL,
    export_lines,
    nix_library_paths,
    nix_store_paths,
    render_shell_nix,
    resolve_environment,
)
from .errors import CheckFailedError, StepwiseError
from .logging_utils import configure_logging


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {number}")
    return number


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stepwise",
        description=(
            "Publish each commit of a step-by-step history as its own branch "
            "and verify that every step builds."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be specified multiple times).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    branches = subparsers.add_parser(
        "branches",
        help="Force-create and force-push a part-* branch for every commit.",
    )
    branches.add_argument(
        "--remote",
        default=DEFAULT_REMOTE,
        help=f"Remote to force-push branches to (default: {DEFAULT_REMOTE}).",
    )
    branches.add_argument(
        "--prefix",
        default=DEFAULT_PREFIX,
        help=f"Prefix for derived branch names (default: {DEFAULT_PREFIX}).",
    )
    branches.add_argument(
        "--start-branches",
        type=_non_negative_int,
        default=DEFAULT_START_BRANCHES,
        metavar="N",
        help=(
            "Number of <prefix><i>.0 start markers to place one commit before "
            f"<prefix><i>.1 (default: {DEFAULT_START_BRANCHES})."
        ),
    )
    branches.add_argument(
        "--no-push",
        dest="push",
        action="store_false",
        help="Only update local branches.",
    )
    branches.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the planned branches without touching any ref.",
    )

    check = subparsers.add_parser(
        "check",
        help="Check out every commit after the first and run a build check.",
    )
    check.add_argument(
        "--command",
        dest="check_command",
        default=DEFAULT_CHECK_COMMAND,
        help=f"Build-verification command (default: {DEFAULT_CHECK_COMMAND!r}).",
    )
    check.add_argument(
        "--allow-dirty",
        action="store_true",
        help="Run even if the working tree has uncommitted changes.",
    )
    check.add_argument(
        "--report",
        dest="report_path",
        help="Write a JSON report of the visited commits to this path.",
    )

    devshell = subparsers.add_parser(
        "devshell",
        help="Render the development shell descriptor.",
    )
    devshell.add_argument(
        "--output",
        help="Write shell.nix to this path instead of stdout.",
    )
    devshell.add_argument(
        "--env",
        action="store_true",
        help="Realise the packages with nix-build and print export lines.",
    )

    return parser


def _config_from_args(args: argparse.Namespace) -> Config:
    config = Config(verbosity=args.verbose)
    if args.command == "branches":
        config.remote = args.remote
        config.prefix = args.prefix
        config.start_branches = args.start_branches
        config.push = args.push
        config.dry_run = args.dry_run
    elif args.command == "check":
        config.check_command = args.check_command
        config.allow_dirty = args.allow_dirty
        config.report_path = args.report_path
    return config


def _run_branches(config: Config) -> int:
    plan = update_branches(config)
    if config.dry_run:
        for assignment in plan.assignments:
            print(f"{assignment.name} -> {assignment.target} ({assignment.source})")
    return 0


def _run_check(config: Config) -> int:
    try:
        report = check_all_commits(config)
    except CheckFailedError as exc:
        if exc.report is not None:
            if config.report_path:
                write_check_report(exc.report, config.report_path)
            print_check_summary(exc.report)
        raise

    if config.report_path:
        write_check_report(report, config.report_path)
    print_check_summary(report)
    return 0


def _run_devshell(args: argparse.Namespace) -> int:
    if args.env:
        env = resolve_environment(
            DEFAULT_SHELL,
            nix_store_paths(DEFAULT_SHELL),
            nix_library_paths(DEFAULT_SHELL),
        )
        print("\n".join(export_lines(env)))
        return 0

    text = render_shell_nix(DEFAULT_SHELL)
    if args.output:
        Path(args.output).write_text(text)
    else:
        sys.stdout.write(text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    config = _config_from_args(args)
    configure_logging(verbosity=config.verbosity)

    try:
        if args.command == "branches":
            return _run_branches(config)
        if args.command == "check":
            return _run_check(config)
        return _run_devshell(args)
    except KeyboardInterrupt:
        # Graceful shutdown on Ctrl+C
        return 130
    except CheckFailedError as exc:
        print(f"stepwise: error: {exc}", file=sys.stderr)
        # Mirror the failing command's status, but never report success.
        return exc.returncode if exc.returncode > 0 else 1
    except StepwiseError as exc:
        print(f"stepwise: error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
