"""Run ID resolution: explicit or auto-generated.

Auto-generation uses:
- the target directory's base name (sanitized)
- prefix_digits / suffix_digits: first/last N digits of a compact UTC timestamp
"""

from __future__ import annotations
import os
import re
from datetime import datetime, timezone
from typing import Optional


def _timestamp_digits(prefix: int = 4, suffix: int = 6) -> tuple[str, str]:
    """Compact timestamp YYYYMMDDHHMMSS; return (first prefix_digits, last suffix_digits)."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")  # 14 digits
    a = ts[: min(prefix, len(ts))]
    b = ts[-min(suffix, len(ts)) :] if suffix else ""
    return (a, b)


def _dir_name(root: str) -> str:
    name = os.path.basename(os.path.normpath(os.path.abspath(root)))
    # Safe for file names: alphanumeric, underscore, dash
    name = re.sub(r"[^\w\-]", "_", name)
    return name or "run"


def generate_run_id(root: str, prefix_digits: int = 4, suffix_digits: int = 6, separator: str = "_") -> str:
    parts = [_dir_name(root)]
    pre, suf = _timestamp_digits(prefix_digits, suffix_digits)
    if pre:
        parts.append(pre)
    if suf:
        parts.append(suf)
    return separator.join(parts)


def resolve_run_id(root: str, explicit: Optional[str] = None) -> str:
    """Return the explicit run id when given, otherwise an auto-generated one."""
    if explicit is not None and str(explicit).strip():
        return str(explicit).strip()
    return generate_run_id(root)
