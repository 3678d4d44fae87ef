"""Show a run report written with `dedup-sort --report <file>`.

Usage:
    python scripts/show_run_report.py reports/last_run.json
"""

from __future__ import annotations
import json
import sys
from datetime import datetime


def _ts(ms) -> str:
    if not ms:
        return "N/A"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def show_run_report(path: str) -> None:
    with open(path, "r", encoding="utf-8") as f:
        report = json.load(f)

    dedup = report.get("dedup", {})
    norm = report.get("normalize", {})
    removed = dedup.get("removed", [])

    print(f"\n{'='*60}")
    print(f"Run Report: {report.get('run_id')}")
    print(f"{'='*60}\n")
    print(f"  Root: {report.get('root')}")
    print(f"  Version: {report.get('version')}")
    print(f"  Started: {_ts(report.get('start_time_ms'))}")
    print(f"  Finished: {_ts(report.get('end_time_ms'))}")
    print(f"  Dry run: {report.get('dry_run', False)}")

    print("\nDuplicates:")
    print("-" * 60)
    print(f"  Files scanned: {dedup.get('files_scanned', 0):,}")
    print(f"  Removed: {len(removed):,} ({dedup.get('bytes_reclaimed', 0) / 1024:.1f} KiB)")
    for item in removed:
        print(f"    {item['path']}  ->  {item['duplicate_of']}")

    print("\nNormalization:")
    print("-" * 60)
    print(f"  Files processed: {norm.get('files_processed', 0):,}")
    print(f"  Files changed: {norm.get('files_changed', 0):,}")
    print()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    show_run_report(sys.argv[1])
