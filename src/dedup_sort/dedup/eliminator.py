"""Exact duplicate file elimination.

One pass over the tree: fingerprint each file -> look up the index -> keep the
first file seen for a fingerprint, delete every later one.

Policy is fixed: first-seen in walk order wins (not newest/oldest by mtime).
The index lives only for one pass; nothing is persisted across runs.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging
import os

from ..errors import FileIOError
from ..utils.hashing import DEFAULT_CHUNK_SIZE, file_fingerprint
from ..utils.walk import iter_files

log = logging.getLogger("dedup_sort.dedup")


class FingerprintIndex:
    """Fingerprint -> canonical (first seen) path."""

    def __init__(self) -> None:
        self._paths: Dict[bytes, str] = {}

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, fp: bytes) -> bool:
        return fp in self._paths

    def canonical(self, fp: bytes) -> Optional[str]:
        return self._paths.get(fp)

    def claim(self, fp: bytes, path: str) -> Optional[str]:
        """Record `path` for `fp` unless already indexed; return the existing canonical path if any."""
        existing = self._paths.get(fp)
        if existing is None:
            self._paths[fp] = path
        return existing


@dataclass
class DedupResult:
    files_scanned: int = 0
    removed: List[Tuple[str, str]] = field(default_factory=list)  # (duplicate, canonical)
    bytes_reclaimed: int = 0
    dry_run: bool = False

    @property
    def removed_count(self) -> int:
        return len(self.removed)


class DuplicateEliminator:
    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, dry_run: bool = False):
        self.chunk_size = chunk_size
        self.dry_run = dry_run

    def eliminate(self, root: str) -> DedupResult:
        index = FingerprintIndex()
        result = DedupResult(dry_run=self.dry_run)

        for path in iter_files(root):
            result.files_scanned += 1
            fp = file_fingerprint(path, self.chunk_size)
            canonical = index.claim(fp, path)
            if canonical is None:
                continue

            size = _size_or_zero(path)
            if self.dry_run:
                log.info(f"Duplicate (dry run): {path} (duplicate of {canonical})")
            else:
                log.info(f"Removing duplicate: {path} (duplicate of {canonical})")
                try:
                    os.remove(path)
                except OSError as e:
                    raise FileIOError(f"Cannot remove duplicate {path}: {e}", "DELETE_FAILED", path) from e
            result.removed.append((path, canonical))
            result.bytes_reclaimed += size

        log.info(
            f"Duplicate scan complete: scanned={result.files_scanned} unique={len(index)} "
            f"removed={result.removed_count} reclaimed_bytes={result.bytes_reclaimed}"
        )
        return result


def _size_or_zero(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError:
        return 0
