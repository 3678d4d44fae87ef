"""Full run: duplicate elimination -> batch normalization -> optional watch.

Any error in the first two steps propagates before watch mode is entered.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging
import os
import time

from ..config import Settings
from ..dedup.eliminator import DedupResult, DuplicateEliminator
from ..errors import UsageError
from ..normalize.lines import LineNormalizer
from ..report import build_report, write_report
from ..run_id import resolve_run_id
from ..watch.loop import WatchLoop
from .batch import BatchProcessor, BatchResult

log = logging.getLogger("dedup_sort.run")


@dataclass
class RunSummary:
    run_id: str
    root: str
    dedup: DedupResult
    batch: BatchResult
    start_time_ms: int
    end_time_ms: int


def check_root(root: Optional[str]) -> str:
    if not root:
        raise UsageError("No directory given")
    if not os.path.exists(root):
        raise UsageError(f"Directory does not exist: {root}", "NOT_A_DIRECTORY")
    if not os.path.isdir(root):
        raise UsageError(f"Not a directory: {root}", "NOT_A_DIRECTORY")
    return root


def _is_within(path: str, root: str) -> bool:
    path = os.path.realpath(path)
    root = os.path.realpath(root)
    return os.path.commonpath([path, root]) == root


def make_watch_loop(root: str, settings: Settings, normalizer: Optional[LineNormalizer] = None) -> WatchLoop:
    return WatchLoop(
        root,
        normalizer or LineNormalizer(atomic=settings.atomic_write),
        debounce_seconds=settings.debounce_seconds,
        queue_size=settings.queue_size,
        overflow=settings.overflow,
        poll_interval=settings.poll_interval,
    )


def run(root: str, settings: Optional[Settings] = None, *, watch: bool = False, run_id: Optional[str] = None) -> RunSummary:
    settings = settings or Settings()
    root = check_root(root)
    if watch and settings.dry_run:
        raise UsageError("Watch mode cannot be combined with a dry run")
    if settings.report_path and _is_within(settings.report_path, root):
        raise UsageError(f"Report path {settings.report_path} must be outside {root}")
    run_id = run_id or resolve_run_id(root, settings.run_id)
    start_time_ms = int(time.time() * 1000)

    log.info(f"Starting run_id={run_id} root={root} dry_run={settings.dry_run} watch={watch}")

    eliminator = DuplicateEliminator(chunk_size=settings.chunk_size, dry_run=settings.dry_run)
    dedup = eliminator.eliminate(root)

    normalizer = LineNormalizer(atomic=settings.atomic_write)
    if settings.dry_run:
        log.info("Dry run: skipping normalization")
        batch = BatchResult()
    else:
        batch = BatchProcessor(normalizer, fail_fast=True, progress=settings.progress).process_tree(root)

    log.info("Sorting and removing duplicates completed successfully.")

    summary = RunSummary(
        run_id=run_id,
        root=root,
        dedup=dedup,
        batch=batch,
        start_time_ms=start_time_ms,
        end_time_ms=int(time.time() * 1000),
    )
    if settings.report_path:
        write_report(settings.report_path, build_report(summary))
        log.info(f"Run report: {settings.report_path}")

    if watch:
        make_watch_loop(root, settings, normalizer).run()
    return summary
