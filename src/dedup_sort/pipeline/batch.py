"""Batch normalization over a directory tree.

Fail-fast by default: the first per-file error aborts the walk and propagates.
With `fail_fast=False` each failure is logged, recorded and skipped; watch mode
uses that for its initial pass so one unreadable file does not prevent watching.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging
from tqdm import tqdm

from ..errors import FileIOError
from ..normalize.lines import LineNormalizer
from ..utils.walk import count_files, iter_files

log = logging.getLogger("dedup_sort.batch")


@dataclass
class BatchResult:
    files_processed: int = 0
    files_changed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (path, error)


class BatchProcessor:
    def __init__(self, normalizer: Optional[LineNormalizer] = None, *, fail_fast: bool = True, progress: bool = False):
        self.normalizer = normalizer or LineNormalizer()
        self.fail_fast = fail_fast
        self.progress = progress

    def process_tree(self, root: str) -> BatchResult:
        result = BatchResult()
        files = iter_files(root)
        if self.progress:
            files = tqdm(files, total=count_files(root), desc="normalize", unit="file", leave=False)

        for path in files:
            try:
                r = self.normalizer.normalize(path)
            except FileIOError as e:
                if self.fail_fast:
                    raise
                log.error(f"Error processing file {path}: {e}")
                result.failures.append((path, str(e)))
                continue
            result.files_processed += 1
            if r.changed:
                result.files_changed += 1

        log.info(
            f"Normalization complete: processed={result.files_processed} "
            f"changed={result.files_changed} failed={len(result.failures)}"
        )
        return result
