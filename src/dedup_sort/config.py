"""Runtime settings.

Settings come from an optional YAML file with simple sections
(`run`, `normalize`, `dedup`, `watch`, `logging`); CLI flags override them.
Unknown keys are ignored so config files can be shared with other tooling.

Example:

    run:
      dry_run: false
      progress: true
      report: /var/log/dedup-sort/last_run.json
    watch:
      debounce_seconds: 1.0
      queue_size: 10
      overflow: block
    logging:
      level: INFO
      log_dir: /var/log/dedup-sort
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional
import logging
import yaml

from .errors import UsageError

OVERFLOW_POLICIES = {"block", "drop"}


@dataclass(frozen=True)
class Settings:
    # run
    run_id: Optional[str] = None
    dry_run: bool = False
    progress: bool = True
    report_path: Optional[str] = None

    # normalize / dedup
    atomic_write: bool = True
    chunk_size: int = 64 * 1024

    # watch
    debounce_seconds: float = 1.0
    queue_size: int = 10
    overflow: str = "block"
    poll_interval: float = 1.0

    # logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return validate(replace(self, **changes)) if changes else self


def load_yaml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise UsageError(f"Cannot read config {path}: {e}", "BAD_CONFIG") from e
    except yaml.YAMLError as e:
        raise UsageError(f"Invalid YAML in config {path}: {e}", "BAD_CONFIG") from e
    if not isinstance(data, dict):
        raise UsageError(f"Config {path} must be a mapping, got {type(data).__name__}", "BAD_CONFIG")
    return data


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = cfg.get(name) or {}
    if not isinstance(sec, dict):
        raise UsageError(f"Config section '{name}' must be a mapping", "BAD_CONFIG")
    return sec


def settings_from_dict(cfg: Dict[str, Any]) -> Settings:
    run = _section(cfg, "run")
    norm = _section(cfg, "normalize")
    dedup = _section(cfg, "dedup")
    watch = _section(cfg, "watch")
    log = _section(cfg, "logging")
    d = Settings()
    try:
        s = Settings(
            run_id=run.get("run_id", d.run_id),
            dry_run=bool(run.get("dry_run", d.dry_run)),
            progress=bool(run.get("progress", d.progress)),
            report_path=run.get("report", d.report_path),
            atomic_write=bool(norm.get("atomic_write", d.atomic_write)),
            chunk_size=int(dedup.get("chunk_size", d.chunk_size)),
            debounce_seconds=float(watch.get("debounce_seconds", d.debounce_seconds)),
            queue_size=int(watch.get("queue_size", d.queue_size)),
            overflow=str(watch.get("overflow", d.overflow)).lower(),
            poll_interval=float(watch.get("poll_interval", d.poll_interval)),
            log_level=str(log.get("level", d.log_level)).upper(),
            log_dir=log.get("log_dir", d.log_dir),
        )
    except (TypeError, ValueError) as e:
        raise UsageError(f"Invalid config value: {e}", "BAD_CONFIG") from e
    return validate(s)


def load_settings(path: Optional[str] = None) -> Settings:
    if not path:
        return Settings()
    return settings_from_dict(load_yaml(path))


def validate(s: Settings) -> Settings:
    if s.debounce_seconds < 0:
        raise UsageError(f"debounce_seconds must be >= 0, got {s.debounce_seconds}", "BAD_CONFIG")
    if s.queue_size < 1:
        raise UsageError(f"queue_size must be >= 1, got {s.queue_size}", "BAD_CONFIG")
    if s.chunk_size < 1:
        raise UsageError(f"chunk_size must be >= 1, got {s.chunk_size}", "BAD_CONFIG")
    if s.poll_interval <= 0:
        raise UsageError(f"poll_interval must be > 0, got {s.poll_interval}", "BAD_CONFIG")
    if not isinstance(logging.getLevelName(s.log_level), int):
        raise UsageError(f"Unknown log level {s.log_level!r}", "BAD_CONFIG")
    if s.overflow not in OVERFLOW_POLICIES:
        raise UsageError(f"overflow must be one of {sorted(OVERFLOW_POLICIES)}, got {s.overflow!r}", "BAD_CONFIG")
    return s
