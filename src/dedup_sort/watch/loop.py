"""Watch mode.

Lifecycle:
  idle -> watching -> stopped
While watching, each "file modified" notification is queued, debounced per
path, then normalized under the context lock (see WatchContext).

run():
1) one batch normalization pass (errors logged per file, never fatal)
2) recursive watchdog subscription on the directory
3) block until stop() / KeyboardInterrupt, re-subscribing if the observer dies

Only modifications are acted upon: creations, deletions, moves, directory events
and our own temporary files are ignored. Atomic rewrites surface as moves, so
the loop does not re-trigger on its own output.
"""

from __future__ import annotations
from typing import Callable, Optional
import logging
import os
import threading
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..errors import WatchSetupError
from ..normalize.lines import LineNormalizer, is_temp_file
from ..pipeline.batch import BatchProcessor
from .context import WatchContext

log = logging.getLogger("dedup_sort.watch")


class WriteEventHandler(FileSystemEventHandler):
    def __init__(self, ctx: WatchContext):
        super().__init__()
        self.ctx = ctx

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = os.fsdecode(event.src_path)
        if is_temp_file(path):
            return
        log.debug(f"Write event: {path}")
        self.ctx.submit(path)


class WatchLoop:
    def __init__(
        self,
        root: str,
        normalizer: Optional[LineNormalizer] = None,
        *,
        debounce_seconds: float = 1.0,
        queue_size: int = 10,
        overflow: str = "block",
        poll_interval: float = 1.0,
        initial_pass: bool = True,
        observer_factory: Callable[[], object] = Observer,
    ):
        self.root = root
        self.normalizer = normalizer or LineNormalizer()
        self.ctx = WatchContext(
            self.normalizer,
            debounce_seconds=debounce_seconds,
            queue_size=queue_size,
            overflow=overflow,
        )
        self.poll_interval = poll_interval
        self.initial_pass = initial_pass
        self.observer_factory = observer_factory
        self.state = "idle"
        self.ready = threading.Event()
        self._observer = None
        self._consumer: Optional[threading.Thread] = None

    def run(self) -> None:
        if self.initial_pass:
            BatchProcessor(self.normalizer, fail_fast=False).process_tree(self.root)

        self._consumer = threading.Thread(target=self.ctx.pump, name="dedup-sort-events", daemon=True)
        self._consumer.start()
        try:
            self._observer = self._subscribe()
            log.info(f"Watching directory: {self.root}")
            self.state = "watching"
            self.ready.set()
            while not self.ctx.stop_event.wait(self.poll_interval):
                self._supervise()
        except KeyboardInterrupt:
            log.info("Interrupted, stopping watch")
        finally:
            self._shutdown()

    def stop(self) -> None:
        self.ctx.stop_event.set()

    def _subscribe(self):
        observer = self.observer_factory()
        try:
            observer.schedule(WriteEventHandler(self.ctx), self.root, recursive=True)
            observer.start()
        except OSError as e:
            raise WatchSetupError(f"Cannot watch {self.root}: {e}") from e
        return observer

    def _supervise(self) -> None:
        if self._observer is not None and self._observer.is_alive():
            return
        log.error(f"Error: filesystem watcher for {self.root} stopped unexpectedly, re-subscribing")
        try:
            self._observer = self._subscribe()
        except WatchSetupError as e:
            # retried on the next tick
            self._observer = None
            log.error(f"Error: {e}")

    def _shutdown(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        self.ctx.close()
        if self._consumer is not None:
            self._consumer.join()
        self.ctx.debouncer.cancel_all()
        # wait for an in-flight normalization to finish
        with self.ctx.lock:
            pass
        self.state = "stopped"
        log.info(f"Stopped watching {self.root}")
