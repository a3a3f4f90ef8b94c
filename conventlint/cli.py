"""
conventlint command line.

Usage:
    conventlint check-files <paths...> [--config PATH] [--format text|json]
    conventlint check-commit <message-or-path|-> [--config PATH] [--format text|json]

Exit codes: 0 no error-severity violations, 1 error violations found,
2 configuration or input failure.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Sequence

from conventlint.config import settings
from conventlint.core.commit_validator import DEFAULT_SOURCE, validate_commit
from conventlint.core.reporter import FORMATS, exit_code, order_by_file, render, write_report
from conventlint.core.rule_loader import resolve_rule_set
from conventlint.errors import EXIT_USAGE, ConventionLintError, InputError
from conventlint.models.report_models import CheckReport
from conventlint.workers.check_worker import CheckWorker

logger = logging.getLogger("conventlint.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conventlint",
        description="Check documentation header conventions and commit messages.",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More logging (repeat for debug)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Rule set file (YAML or JSON)")
    common.add_argument(
        "--format",
        choices=FORMATS,
        default=settings.default_format if settings.default_format in FORMATS else "text",
        help="Report format",
    )
    common.add_argument("--output", help="Write the report to a file instead of stdout")

    files = sub.add_parser("check-files", parents=[common], help="Check source files")
    files.add_argument("paths", nargs="+", help="Files or directories to check")
    files.add_argument("--workers", type=int, help="Files checked concurrently")

    commit = sub.add_parser("check-commit", parents=[common], help="Check a commit message")
    commit.add_argument(
        "message", help="Commit message text, a path to a message file, or '-' for stdin"
    )
    return parser


def _configure_logging(verbose: int) -> None:
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbose:
        level = logging.DEBUG if verbose > 1 else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def read_commit_input(argument: str) -> tuple[str, str]:
    """Return (message text, source label) for the check-commit argument."""
    if argument == "-":
        return sys.stdin.read(), DEFAULT_SOURCE
    path = Path(argument)
    try:
        is_file = "\n" not in argument and path.is_file()
    except OSError:
        # e.g. a one-line message longer than the OS name limit
        is_file = False
    if not is_file:
        return argument, DEFAULT_SOURCE
    try:
        return path.read_text(encoding="utf-8"), path.as_posix()
    except OSError as e:
        raise InputError(f"cannot read commit message '{argument}': {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise InputError(f"commit message '{argument}' is not valid UTF-8") from e


async def _run_files(worker: CheckWorker, paths: Sequence[str]) -> CheckReport:
    loop = asyncio.get_running_loop()
    installed = False
    try:
        loop.add_signal_handler(signal.SIGINT, worker.cancel)
        installed = True
    except (NotImplementedError, RuntimeError):
        logger.debug("SIGINT cancellation unavailable on this platform")
    try:
        return await worker.run(paths)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def cmd_check_files(args: argparse.Namespace) -> int:
    rule_set = resolve_rule_set(args.config)
    worker = CheckWorker(rule_set, max_workers=args.workers)
    report = asyncio.run(_run_files(worker, args.paths))
    _emit(render(order_by_file(report.violations), args.format), args.output)
    if report.cancelled:
        print(
            f"conventlint: cancelled, {report.files_skipped} files not checked",
            file=sys.stderr,
        )
    return exit_code(report.violations)


def cmd_check_commit(args: argparse.Namespace) -> int:
    rule_set = resolve_rule_set(args.config)
    text, source = read_commit_input(args.message)
    violations = validate_commit(text, rule_set.commit, source)
    _emit(render(violations, args.format), args.output)
    return exit_code(violations)


def _emit(text: str, output: str | None) -> None:
    try:
        write_report(text, output)
    except OSError as e:
        raise InputError(f"cannot write report '{output}': {e.strerror or e}") from e


COMMANDS = {
    "check-files": cmd_check_files,
    "check-commit": cmd_check_commit,
}


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if getattr(args, "workers", None) is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    try:
        return COMMANDS[args.command](args)
    except ConventionLintError as e:
        print(f"conventlint: {e.kind.value}: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("conventlint: interrupted", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
