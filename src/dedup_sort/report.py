"""Run report.

Optional JSON manifest written at the end of the one-shot phase:

{
  "run_id": "...",
  "root": "/abs/path",
  "version": "0.3.6",
  "start_time_ms": 123,
  "end_time_ms": 456,
  "dry_run": false,
  "dedup": {"files_scanned": 10, "removed": [{"path": "...", "duplicate_of": "..."}], "bytes_reclaimed": 42},
  "normalize": {"files_processed": 9, "files_changed": 3}
}

Written via tmp file + os.replace so a partially written report never replaces a good one.
"""

from __future__ import annotations
from typing import Any, Dict
import json
import os

from .errors import FileIOError


def build_report(summary) -> Dict[str, Any]:
    from . import __version__

    dedup = summary.dedup
    batch = summary.batch
    return {
        "run_id": summary.run_id,
        "root": os.path.abspath(summary.root),
        "version": __version__,
        "start_time_ms": summary.start_time_ms,
        "end_time_ms": summary.end_time_ms,
        "dry_run": dedup.dry_run,
        "dedup": {
            "files_scanned": dedup.files_scanned,
            "removed": [{"path": p, "duplicate_of": c} for p, c in dedup.removed],
            "bytes_reclaimed": dedup.bytes_reclaimed,
        },
        "normalize": {
            "files_processed": batch.files_processed,
            "files_changed": batch.files_changed,
        },
    }


def write_report(path: str, report: Dict[str, Any]) -> None:
    tmp = path + ".tmp"
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
    except OSError as e:
        raise FileIOError(f"Cannot write report {path}: {e}", "WRITE_FAILED", path) from e
