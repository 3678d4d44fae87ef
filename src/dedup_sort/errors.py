"""Error taxonomy.

- FileIOError: open/read/write/delete/traversal failures (always chained to the OSError)
- UsageError: bad CLI arguments, missing directory, invalid config
- WatchSetupError: filesystem subscription could not be created or attached
"""

from __future__ import annotations
from typing import Optional


class DedupSortError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class FileIOError(DedupSortError):
    def __init__(self, message: str, code: str, path: Optional[str] = None) -> None:
        super().__init__(message, code)
        self.path = path


class UsageError(DedupSortError):
    def __init__(self, message: str, code: str = "USAGE") -> None:
        super().__init__(message, code)


class WatchSetupError(DedupSortError):
    def __init__(self, message: str, code: str = "WATCH_SETUP") -> None:
        super().__init__(message, code)
