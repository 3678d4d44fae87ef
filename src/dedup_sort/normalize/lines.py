"""Line normalization.

Transform applied to one file:
- strip surrounding whitespace (ASCII and Unicode spaces) from every line
- drop empty lines and lines starting with `#` or `//`
- keep one copy of each distinct line (exact, case-sensitive)
- sort ascending byte-wise and write one line per `\\n`

Lines are handled as bytes end to end: any encoding survives untouched and the
sort order is true byte order. Reading iterates the binary file object, so a
single line may be arbitrarily long.

Rewrites go through a temporary file in the same directory followed by
`os.replace`, so a crash leaves either the old or the new content. With
`atomic=False` the file is truncated and rewritten in place; a failure mid-write
can then leave it truncated.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List
import hashlib
import logging
import os
import shutil
import tempfile

from ..errors import FileIOError

log = logging.getLogger("dedup_sort.normalize")

COMMENT_PREFIXES = (b"#", b"//")
# ASCII plus Unicode White_Space characters
_SPACE = (
    " \t\n\v\f\r\x85\xa0\u1680"
    + "".join(chr(c) for c in range(0x2000, 0x200B))
    + "\u2028\u2029\u202f\u205f\u3000"
)
TEMP_PREFIX = ".dedup-sort-"
TEMP_SUFFIX = ".tmp"


def strip_line(raw: bytes) -> bytes:
    """Trim surrounding whitespace, including Unicode spaces in UTF-8 text."""
    s = raw.strip()
    if not s or (s[0] < 0x80 and s[-1] < 0x80):
        return s
    # surrogateescape round-trips bytes that are not valid UTF-8
    return s.decode("utf-8", "surrogateescape").strip(_SPACE).encode("utf-8", "surrogateescape")


def keep_line(stripped: bytes) -> bool:
    return bool(stripped) and not stripped.startswith(COMMENT_PREFIXES)


def normalize_lines(lines: Iterable[bytes]) -> List[bytes]:
    """Apply the transform to raw lines (with or without line endings)."""
    unique = set()
    for raw in lines:
        s = strip_line(raw)
        if keep_line(s):
            unique.add(s)
    return sorted(unique)


def is_temp_file(path: str) -> bool:
    name = os.path.basename(path)
    return name.startswith(TEMP_PREFIX) and name.endswith(TEMP_SUFFIX)


@dataclass
class NormalizeResult:
    path: str
    lines_read: int
    lines_written: int
    changed: bool


class LineNormalizer:
    def __init__(self, atomic: bool = True):
        self.atomic = atomic

    def normalize(self, path: str) -> NormalizeResult:
        original = hashlib.sha256()
        original_size = 0
        lines_read = 0

        def tracked(f):
            nonlocal original_size, lines_read
            for raw in f:
                original.update(raw)
                original_size += len(raw)
                lines_read += 1
                yield raw

        try:
            with open(path, "rb") as f:
                lines = normalize_lines(tracked(f))
        except OSError as e:
            raise FileIOError(f"Cannot read {path}: {e}", "READ_FAILED", path) from e

        new = hashlib.sha256()
        new_size = 0
        for line in lines:
            new.update(line)
            new.update(b"\n")
            new_size += len(line) + 1

        if new_size == original_size and new.digest() == original.digest():
            log.debug(f"Already normalized: {path}")
            return NormalizeResult(path, lines_read, len(lines), changed=False)

        if self.atomic:
            self._write_atomic(path, lines)
        else:
            self._write_in_place(path, lines)
        log.debug(f"Normalized {path}: lines_read={lines_read} lines_written={len(lines)}")
        return NormalizeResult(path, lines_read, len(lines), changed=True)

    def _write_in_place(self, path: str, lines: List[bytes]) -> None:
        try:
            with open(path, "wb") as f:
                for line in lines:
                    f.write(line)
                    f.write(b"\n")
        except OSError as e:
            raise FileIOError(f"Cannot write {path}: {e}", "WRITE_FAILED", path) from e

    def _write_atomic(self, path: str, lines: List[bytes]) -> None:
        # write through symlinks: replace the target, keep the link
        target = os.path.realpath(path)
        directory = os.path.dirname(target)
        try:
            fd, tmp = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX, dir=directory)
        except OSError as e:
            raise FileIOError(f"Cannot create temporary file next to {path}: {e}", "WRITE_FAILED", path) from e
        try:
            with os.fdopen(fd, "wb") as f:
                for line in lines:
                    f.write(line)
                    f.write(b"\n")
                f.flush()
                os.fsync(f.fileno())
            shutil.copymode(target, tmp)
            os.replace(tmp, target)
        except OSError as e:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise FileIOError(f"Cannot write {path}: {e}", "WRITE_FAILED", path) from e
