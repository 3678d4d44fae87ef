"""CLI entrypoint.

Usage:
- `dedup-sort <directory>`: remove duplicate files, then normalize every file
- `dedup-sort <directory> -watch`: same, then keep re-normalizing files on write
- `dedup-sort -path <directory>`: directory given as an option
- `dedup-sort -version`

Long options work with one or two dashes (`-watch` / `--watch`).
Exit codes: 0 success, 1 usage error or processing failure.
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import OVERFLOW_POLICIES, load_settings
from .errors import DedupSortError, UsageError
from .logging_ import setup_logging
from .pipeline.run import run
from .run_id import resolve_run_id

log = logging.getLogger("dedup_sort.cli")

USAGE = "dedup-sort <directory-path> [-watch]"


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(prog="dedup-sort", usage=USAGE, allow_abbrev=False)
    p.add_argument("directory", nargs="?", help="Directory to process")
    p.add_argument("-path", "--path", dest="path", default="", help="The path to the directory to process")
    p.add_argument("-watch", "--watch", action="store_true", help="Watch the directory for changes")
    p.add_argument("-version", "--version", action="version", version=f"Version: {__version__}",
                   help="Print the version of the program")

    p.add_argument("--config", help="YAML settings file")
    p.add_argument("--debounce", type=float, metavar="SECONDS", help="Delay before reacting to a write (default: 1.0)")
    p.add_argument("--queue-size", type=int, help="Pending change notifications before overflow (default: 10)")
    p.add_argument("--overflow", choices=sorted(OVERFLOW_POLICIES), help="What to do when the queue is full")
    p.add_argument("--dry-run", action="store_true", default=None, help="Report duplicates without changing anything")
    p.add_argument("--no-progress", dest="progress", action="store_false", default=None, help="Disable the progress bar")
    p.add_argument("--in-place", dest="atomic_write", action="store_false", default=None,
                   help="Rewrite files in place instead of via a temporary file")
    p.add_argument("--report", help="Write a JSON run report to this path")
    p.add_argument("--log-dir", help="Also write logs to <log-dir>/<run_id>.log")
    p.add_argument("--log-level", help="Log level (default: INFO)")
    p.add_argument("--run-id", help="Explicit run id (names the log file)")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    p = build_parser()
    try:
        args = p.parse_args(argv)
        settings = load_settings(args.config).with_overrides(
            run_id=args.run_id,
            dry_run=args.dry_run,
            progress=args.progress,
            atomic_write=args.atomic_write,
            report_path=args.report,
            debounce_seconds=args.debounce,
            queue_size=args.queue_size,
            overflow=args.overflow,
            log_dir=args.log_dir,
            log_level=args.log_level.upper() if args.log_level else None,
        )
        root = args.directory or args.path
        if not root:
            raise UsageError(f"Usage: {USAGE}")
    except UsageError as e:
        # logging is not configured yet
        print(f"Error: {e}", file=sys.stderr)
        p.print_usage(sys.stderr)
        return 1

    run_id = resolve_run_id(root, settings.run_id)
    try:
        setup_logging(run_id, log_dir=settings.log_dir, level=settings.log_level)
    except OSError as e:
        print(f"Error: cannot set up logging in {settings.log_dir}: {e}", file=sys.stderr)
        return 1

    try:
        run(root, settings, watch=args.watch, run_id=run_id)
    except DedupSortError as e:
        log.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        log.error("Interrupted")
        return 1
    return 0
