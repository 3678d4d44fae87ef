"""Watch session state.

A WatchContext owns everything a watch session shares between threads:
- `lock`: serializes verify-then-normalize, across all files
- `events`: bounded queue between the filesystem notifier and the debounce stage
- `stop_event`: cancellation signal for the whole session
- `debouncer`: per-path timers that call `process()`

Overflow policy for `events` (capacity `queue_size`):
- block: the notifier waits for room (events are never lost)
- drop: the event is discarded with a warning
"""

from __future__ import annotations
from typing import Optional
import logging
import os
import queue
import threading

from ..errors import FileIOError
from ..normalize.lines import LineNormalizer, NormalizeResult
from .debounce import EventDebouncer

log = logging.getLogger("dedup_sort.watch")

_SENTINEL = None
_PUT_TIMEOUT = 0.5


class WatchContext:
    def __init__(
        self,
        normalizer: LineNormalizer,
        *,
        debounce_seconds: float = 1.0,
        queue_size: int = 10,
        overflow: str = "block",
    ):
        self.normalizer = normalizer
        self.overflow = overflow
        self.lock = threading.Lock()
        self.events: "queue.Queue[Optional[str]]" = queue.Queue(maxsize=queue_size)
        self.stop_event = threading.Event()
        self.debouncer = EventDebouncer(debounce_seconds, self.process)
        self.dropped = 0
        self.processed = 0

    def submit(self, path: str) -> bool:
        """Queue a write notification; return False if it was dropped."""
        if self.overflow == "drop":
            try:
                self.events.put_nowait(path)
            except queue.Full:
                self.dropped += 1
                log.warning(f"Event queue full, dropping change notification for {path}")
                return False
            return True

        while not self.stop_event.is_set():
            try:
                self.events.put(path, timeout=_PUT_TIMEOUT)
                return True
            except queue.Full:
                continue
        return False

    def pump(self) -> None:
        """Move queued notifications into the debounce stage until closed."""
        while True:
            path = self.events.get()
            if path is _SENTINEL:
                return
            self.debouncer.touch(path)

    def close(self) -> None:
        self.stop_event.set()
        self.events.put(_SENTINEL)

    def process(self, path: str) -> Optional[NormalizeResult]:
        with self.lock:
            if self.stop_event.is_set():
                return None
            if not os.path.isfile(path):
                # removed (or replaced by a directory) while debouncing
                log.debug(f"Skipping {path}: no longer exists")
                return None
            log.info(f"Processing file: {path}")
            try:
                result = self.normalizer.normalize(path)
            except FileIOError as e:
                log.error(f"Error processing file {path}: {e}")
                return None
            self.processed += 1
            return result
