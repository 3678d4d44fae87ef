"""
Pytest configuration and fixtures
"""
from pathlib import Path
import sys
import time
from typing import Callable, Dict

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_ROOT = PROJECT_ROOT / "src"

# Allow running the suite from a checkout without `pip install -e .`
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Dict[str, bytes]], Path]:
    """Create files under a fresh `tree/` directory from {relative_path: content}."""

    def _make(files: Dict[str, bytes]) -> Path:
        root = tmp_path / "tree"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            p = root / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(content)
        return root

    return _make


def wait_for(predicate: Callable[[], bool], timeout: float = 10.0, interval: float = 0.05) -> bool:
    """Poll until predicate() is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture(autouse=True)
def _reset_logging_handlers():
    """Drop handlers installed by setup_logging (the CLI tests call it)."""
    yield
    import logging

    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, "_dedup_sort_handler", False):
            root.removeHandler(h)
            h.close()
