"""Per-path debounce stage.

Every event for a path (re)starts that path's timer; the callback runs once the
path has been quiet for `delay` seconds. A burst of writes to one file therefore
collapses into a single callback, while different paths debounce independently.
"""

from __future__ import annotations
from typing import Callable, Dict
import logging
import threading

log = logging.getLogger("dedup_sort.watch")


class EventDebouncer:
    def __init__(self, delay: float, callback: Callable[[str], object]):
        self.delay = delay
        self.callback = callback
        self._timers: Dict[str, threading.Timer] = {}
        self._lock = threading.Lock()
        self._closed = False

    def touch(self, path: str) -> None:
        with self._lock:
            if self._closed:
                return
            old = self._timers.pop(path, None)
            if old is not None:
                old.cancel()
            t = threading.Timer(self.delay, self._fire, args=(path,))
            t.daemon = True
            self._timers[path] = t
            t.start()

    def _fire(self, path: str) -> None:
        with self._lock:
            # superseded by a newer event, or cancelled after the timer already started
            if self._timers.get(path) is not threading.current_thread():
                return
            del self._timers[path]
        try:
            self.callback(path)
        except Exception:
            log.exception(f"Unhandled error while processing {path}")

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def cancel_all(self) -> None:
        with self._lock:
            self._closed = True
            timers = list(self._timers.values())
            self._timers.clear()
        for t in timers:
            t.cancel()
