"""Recursive directory walk.

Yields every non-directory entry under a root in lexical order, descending into
subdirectories at the position their name sorts to (so `a/x.txt` comes before
`b.txt`). Symbolic links are yielded as files and never followed into
directories.

Traversal errors are raised as FileIOError at the entry that failed; callers
that want fail-fast behavior simply let the exception propagate out of the loop.
"""

from __future__ import annotations
import os
from typing import Iterator

from ..errors import FileIOError


def _scan_sorted(path: str) -> list:
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        raise FileIOError(f"Cannot list directory {path}: {e}", "WALK_FAILED", path) from e
    entries.sort(key=lambda e: e.name)
    return entries


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError as e:
        raise FileIOError(f"Cannot stat {entry.path}: {e}", "WALK_FAILED", entry.path) from e


def iter_files(root: str) -> Iterator[str]:
    if not os.path.isdir(root):
        raise FileIOError(f"Not a directory: {root}", "WALK_FAILED", root)
    stack = [iter(_scan_sorted(root))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        if _is_dir(entry):
            stack.append(iter(_scan_sorted(entry.path)))
        else:
            yield entry.path


def count_files(root: str) -> int:
    return sum(1 for _ in iter_files(root))
