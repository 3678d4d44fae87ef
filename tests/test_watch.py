"""Tests for watch mode: debounce stage, watch context and the watchdog loop."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path

import pytest

from conftest import wait_for
from dedup_sort.errors import WatchSetupError
from dedup_sort.normalize import LineNormalizer
from dedup_sort.watch import EventDebouncer, WatchContext, WatchLoop


# =============================================================================
# Debouncer
# =============================================================================


class TestEventDebouncer:
    def test_burst_on_one_path_collapses(self):
        calls = []
        d = EventDebouncer(0.2, calls.append)
        for _ in range(5):
            d.touch("/a")
            time.sleep(0.02)
        assert wait_for(lambda: calls == ["/a"], timeout=2)
        time.sleep(0.3)
        assert calls == ["/a"]

    def test_paths_debounce_independently(self):
        calls = []
        lock = threading.Lock()

        def record(p):
            with lock:
                calls.append(p)

        d = EventDebouncer(0.1, record)
        d.touch("/a")
        d.touch("/b")
        assert wait_for(lambda: sorted(calls) == ["/a", "/b"], timeout=2)

    def test_cancel_all_prevents_callbacks(self):
        calls = []
        d = EventDebouncer(0.2, calls.append)
        d.touch("/a")
        assert d.pending() == 1
        d.cancel_all()
        d.touch("/b")
        time.sleep(0.4)
        assert calls == []
        assert d.pending() == 0

    def test_callback_error_is_logged_not_raised(self, caplog):
        def boom(path):
            raise RuntimeError("kaput")

        d = EventDebouncer(0.05, boom)
        with caplog.at_level(logging.ERROR, logger="dedup_sort.watch"):
            d.touch("/a")
            assert wait_for(lambda: "kaput" in caplog.text, timeout=2)


# =============================================================================
# WatchContext
# =============================================================================


class TestWatchContext:
    def test_process_normalizes_file(self, tmp_path: Path):
        p = tmp_path / "f.txt"
        p.write_bytes(b"line3\nline1\n")
        ctx = WatchContext(LineNormalizer())
        result = ctx.process(str(p))
        assert result is not None and result.changed
        assert p.read_bytes() == b"line1\nline3\n"
        assert ctx.processed == 1

    def test_file_deleted_during_debounce_is_skipped(self, tmp_path: Path, caplog):
        p = tmp_path / "f.txt"
        p.write_bytes(b"b\na\n")
        ctx = WatchContext(LineNormalizer(), debounce_seconds=0.2)

        with caplog.at_level(logging.DEBUG, logger="dedup_sort.watch"):
            ctx.debouncer.touch(str(p))
            p.unlink()
            assert wait_for(lambda: ctx.debouncer.pending() == 0, timeout=2)
            time.sleep(0.1)

        assert ctx.processed == 0
        assert not any(r.levelno >= logging.WARNING for r in caplog.records)

    def test_process_after_stop_does_nothing(self, tmp_path: Path):
        p = tmp_path / "f.txt"
        p.write_bytes(b"b\na\n")
        ctx = WatchContext(LineNormalizer())
        ctx.close()
        assert ctx.process(str(p)) is None
        assert p.read_bytes() == b"b\na\n"
        assert ctx.processed == 0

    def test_drop_policy_discards_when_full(self):
        ctx = WatchContext(LineNormalizer(), queue_size=1, overflow="drop")
        assert ctx.submit("/a") is True
        assert ctx.submit("/b") is False
        assert ctx.dropped == 1

    def test_block_policy_waits_until_stopped(self):
        ctx = WatchContext(LineNormalizer(), queue_size=1, overflow="block")
        assert ctx.submit("/a") is True
        outcome = []
        t = threading.Thread(target=lambda: outcome.append(ctx.submit("/b")))
        t.start()
        time.sleep(0.2)
        assert t.is_alive()
        ctx.stop_event.set()
        t.join(timeout=2)
        assert outcome == [False]

    def test_pump_feeds_debouncer_until_closed(self, tmp_path: Path):
        p = tmp_path / "f.txt"
        p.write_bytes(b"b\na\n")
        ctx = WatchContext(LineNormalizer(), debounce_seconds=0.05)
        t = threading.Thread(target=ctx.pump)
        t.start()
        ctx.submit(str(p))
        assert wait_for(lambda: p.read_bytes() == b"a\nb\n", timeout=2)
        ctx.close()
        t.join(timeout=2)
        assert not t.is_alive()

    def test_normalizations_never_overlap(self, tmp_path: Path):
        active = []
        overlaps = []

        class SlowNormalizer(LineNormalizer):
            def normalize(self, path):
                active.append(path)
                if len(active) > 1:
                    overlaps.append(tuple(active))
                time.sleep(0.1)
                active.remove(path)
                return super().normalize(path)

        files = []
        for i in range(4):
            f = tmp_path / f"{i}.txt"
            f.write_bytes(b"b\na\n")
            files.append(str(f))

        ctx = WatchContext(SlowNormalizer(), debounce_seconds=0.01)
        for f in files:
            ctx.debouncer.touch(f)
        assert wait_for(lambda: ctx.processed == 4, timeout=5)
        assert overlaps == []


# =============================================================================
# WatchLoop
# =============================================================================


def _start(loop: WatchLoop) -> threading.Thread:
    t = threading.Thread(target=loop.run, daemon=True)
    t.start()
    assert loop.ready.wait(timeout=10), "watch loop did not start"
    return t


def _stop(loop: WatchLoop, t: threading.Thread) -> None:
    loop.stop()
    t.join(timeout=10)
    assert not t.is_alive()


class TestWatchLoop:
    def test_write_to_watched_file_is_normalized(self, make_tree):
        root = make_tree({"watched.txt": b"old\n", "other.txt": b"keep\n"})
        loop = WatchLoop(str(root), debounce_seconds=0.2, poll_interval=0.05)
        t = _start(loop)
        try:
            (root / "watched.txt").write_bytes(b"line3\nline1\n")
            assert wait_for(lambda: (root / "watched.txt").read_bytes() == b"line1\nline3\n")
            assert (root / "other.txt").read_bytes() == b"keep\n"
        finally:
            _stop(loop, t)
        assert loop.state == "stopped"

    def test_write_in_subdirectory_is_normalized(self, make_tree):
        root = make_tree({"sub/deep.txt": b"x\n"})
        loop = WatchLoop(str(root), debounce_seconds=0.1, poll_interval=0.05)
        t = _start(loop)
        try:
            (root / "sub" / "deep.txt").write_bytes(b"# c\nz\ny\nz\n")
            assert wait_for(lambda: (root / "sub" / "deep.txt").read_bytes() == b"y\nz\n")
        finally:
            _stop(loop, t)

    def test_initial_pass_normalizes_existing_files(self, make_tree):
        root = make_tree({"a.txt": b"b\na\n"})
        loop = WatchLoop(str(root), debounce_seconds=0.1, poll_interval=0.05)
        t = _start(loop)
        try:
            assert (root / "a.txt").read_bytes() == b"a\nb\n"
        finally:
            _stop(loop, t)

    def test_subscription_failure_raises_setup_error(self, make_tree):
        root = make_tree({"a.txt": b"a\n"})

        class BrokenObserver:
            def schedule(self, *args, **kwargs):
                raise OSError(28, "inotify watch limit reached")

        loop = WatchLoop(str(root), initial_pass=False, observer_factory=BrokenObserver)
        with pytest.raises(WatchSetupError):
            loop.run()
        assert loop.state == "stopped"

    def test_dead_observer_is_resubscribed(self, make_tree, caplog):
        root = make_tree({"a.txt": b"a\n"})
        created = []

        class FakeObserver:
            def __init__(self):
                self.alive = False
                created.append(self)

            def schedule(self, *args, **kwargs):
                pass

            def start(self):
                # the first observer dies right away, later ones stay up
                self.alive = len(created) > 1

            def is_alive(self):
                return self.alive

            def stop(self):
                self.alive = False

            def join(self, timeout=None):
                pass

        loop = WatchLoop(str(root), initial_pass=False, poll_interval=0.05, observer_factory=FakeObserver)
        with caplog.at_level(logging.ERROR, logger="dedup_sort.watch"):
            t = _start(loop)
            try:
                assert wait_for(lambda: len(created) >= 2, timeout=5)
            finally:
                _stop(loop, t)
        assert "stopped unexpectedly" in caplog.text
