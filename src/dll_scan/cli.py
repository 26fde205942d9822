"""Command-line entrypoint."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn, TextIO

from dll_scan.config import DEFAULT_TARGET, AppConfig, CliOverrides, load_effective_config
from dll_scan.errors import ConfigError, DllScanError, ErrorPolicy
from dll_scan.logging import JsonlAuditLogger
from dll_scan.scan import ScanSummary, scan_tree
from dll_scan.sinks import build_console_hooks

EXIT_OK = 0
EXIT_SCAN_FAILED = 1
EXIT_USAGE = 2

_DESCRIPTION = (
    "Recursively scan a directory tree, including the contents of zip archives, "
    "for a target dll and report the product and file version of every instance found."
)
_EPILOG = "Output is CSV (Path,ProductVersion,FileVersion) unless -v is given."


class UsageError(Exception):
    """Raised for invalid command-line input."""


class _UsageParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for scan options."""
    parser = _UsageParser(
        prog="dll-scan",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        allow_abbrev=False,
    )
    parser.add_argument(
        "path",
        help="Starting directory. The scan is recursive and also looks inside zip files.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Verbose mode. Prints diagnostic lines instead of CSV.",
    )
    parser.add_argument(
        "-target",
        "--target",
        dest="target",
        metavar="FILENAME",
        default=None,
        help=f'Search target dll. Default is "{DEFAULT_TARGET}".',
    )
    parser.add_argument(
        "--on-error",
        choices=[policy.value for policy in ErrorPolicy],
        default=None,
        help="Abort on the first unreadable directory, archive or binary, or skip it.",
    )
    parser.add_argument("--config", default=None, help="Path to a dll_scan.toml file.")
    parser.add_argument("--audit-log", default=None, help="Append JSONL scan events to this file.")
    return parser


def run_scan(
    start: Path,
    config: AppConfig,
    out_stream: TextIO,
    err_stream: TextIO | None = None,
) -> ScanSummary:
    """Run one scan with console output selected by ``config``.

    Failures skipped under the ``skip`` policy are reported on ``err_stream``.
    """
    hooks = build_console_hooks(
        out_stream, verbose=config.output.verbose, warn_stream=err_stream
    )
    audit = JsonlAuditLogger(config.output.audit_log) if config.output.audit_log else None
    return scan_tree(start, config.scan, hooks, audit=audit)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the dll-scan process."""
    parser = build_arg_parser()
    try:
        args = parser.parse_args(argv)
        config = load_effective_config(
            config_path=Path(args.config) if args.config is not None else None,
            overrides=CliOverrides(
                target=args.target,
                on_error=ErrorPolicy(args.on_error) if args.on_error is not None else None,
                verbose=args.verbose,
                audit_log=Path(args.audit_log) if args.audit_log is not None else None,
            ),
        )
        start = Path(args.path)
        if not start.is_dir():
            raise UsageError(f"Starting path '{args.path}' is not an existing directory.")
    except (UsageError, ConfigError) as exc:
        _print_usage_error(parser, str(exc))
        return EXIT_USAGE

    try:
        run_scan(start, config, sys.stdout, sys.stderr)
    except DllScanError as exc:
        sys.stdout.flush()
        print(f"Error ({exc.code}): {exc}", file=sys.stderr)
        return EXIT_SCAN_FAILED
    return EXIT_OK


def _print_usage_error(parser: argparse.ArgumentParser, message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    print(file=sys.stdout)
    parser.print_help(file=sys.stdout)


if __name__ == "__main__":
    raise SystemExit(main())
