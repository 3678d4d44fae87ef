"""Logging utilities.

We use Python's standard `logging` module with a compact structured format.
Progress lines (duplicates removed, files processed, directory watched) are
ordinary INFO records, so they show up on the console and in the log file.

- Console: always
- File: `<log_dir>/<run_id>.log` when a log directory is configured
"""

from __future__ import annotations
import logging
import os
from typing import Optional, Union

_HANDLER_TAG = "_dedup_sort_handler"


def setup_logging(run_id: str, log_dir: Optional[str] = None, level: Union[int, str] = logging.INFO) -> Optional[str]:
    """
    Setup logging configuration.

    Args:
        run_id: Run identifier (names the log file)
        log_dir: Directory for the log file (if None, console only)
        level: Root log level

    Returns:
        Path of the log file, or None when logging to console only
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Re-running setup (tests, repeated CLI calls in one process) replaces our handlers
    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    log_path = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, f"{run_id}.log")
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(fmt)
        setattr(fh, _HANDLER_TAG, True)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    setattr(ch, _HANDLER_TAG, True)
    root.addHandler(ch)
    return log_path
