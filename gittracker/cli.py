"""CLI entry point for gittracker."""

from __future__ import annotations

import argparse
import logging
import sys

from gittracker import __version__
from gittracker.aggregate import SORT_ORDERS, ScanOptions, ScanResult, scan
from gittracker.errors import FatalScanError
from gittracker.git import DEFAULT_TIMEOUT

EXIT_OK = 0
EXIT_FATAL = 2
EXIT_INTERRUPTED = 130


def setup_logging(verbosity: int) -> None:
    """Send log records to stderr through Rich."""
    from rich.console import Console
    from rich.logging import RichHandler

    if verbosity > 0:
        level = logging.DEBUG
    elif verbosity < 0:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def options_from_args(args: argparse.Namespace) -> ScanOptions:
    return ScanOptions(
        show_clean=args.show_clean,
        json=args.json_output,
        jobs=args.jobs,
        timeout=args.timeout,
        untracked=not args.no_untracked,
        nested=args.nested,
        max_depth=args.max_depth,
        exclude=frozenset(args.exclude),
        sort=args.sort,
    )


def _run_scan(scan_path: str, options: ScanOptions, *, show_progress: bool) -> ScanResult:
    """Run the scan, with a progress counter on stderr when it's a terminal."""
    if not show_progress:
        return scan(scan_path, options)

    def _progress(done: int, path: str) -> None:
        name = path.rstrip("/").split("/")[-1]
        print(f"\r  [{done}] {name:<30}", end="", file=sys.stderr)

    try:
        return scan(scan_path, options, progress=_progress)
    finally:
        print("\r" + " " * 40 + "\r", end="", file=sys.stderr)


def print_report(result: ScanResult) -> None:
    """Print the human report to stdout."""
    from rich.console import Console

    from gittracker.export import render_lines

    console = Console()
    for line in render_lines(result):
        console.print(line)


def print_json(result: ScanResult) -> None:
    """Dump the scan result as JSON to stdout."""
    from gittracker.export import to_json

    print(to_json(result))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gittracker",
        description="Scan folders for git repositories with local changes.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Root folder to scan (default: current directory)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output JSON instead of human-readable lines",
    )
    parser.add_argument(
        "--show-clean",
        action="store_true",
        help="Include clean repositories in output",
    )
    parser.add_argument(
        "--tui",
        action="store_true",
        help="Open the interactive dashboard",
    )
    parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=8,
        metavar="N",
        help="Number of repositories probed in parallel (default: 8)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        metavar="SECONDS",
        help=f"Per-repository git timeout (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--no-untracked",
        action="store_true",
        help="Don't count untracked files as changes",
    )
    parser.add_argument(
        "--nested",
        action="store_true",
        help="Keep looking for repositories inside repositories",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        metavar="N",
        help="Don't look deeper than N directories below the root",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="NAME",
        help="Skip directories with this name (repeatable, e.g. node_modules)",
    )
    parser.add_argument(
        "--sort",
        choices=SORT_ORDERS,
        default="discovery",
        help="Order of reported repositories (default: discovery)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log debug details to stderr",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"gittracker {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the gittracker CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(-1 if args.quiet else args.verbose)

    try:
        options = options_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    if args.tui:
        from gittracker.tui import run_tui
        run_tui(args.path, options)
        return EXIT_OK

    try:
        result = _run_scan(
            args.path,
            options,
            show_progress=not options.json and sys.stderr.isatty(),
        )
    except FatalScanError as exc:
        from rich.console import Console
        from rich.markup import escape

        Console(stderr=True).print(f"[bold red]error:[/bold red] {escape(str(exc))}")
        return EXIT_FATAL

    if options.json:
        print_json(result)
    else:
        print_report(result)

    return EXIT_INTERRUPTED if result.interrupted else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
