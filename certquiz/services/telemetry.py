# FILE: certquiz/services/telemetry.py
"""
Quiz telemetry (summary-only, rotated JSONL)

- Appends one line per event to <LOGS_DIR>/telemetry/events-YYYY-MM-DD.jsonl (UTC dates).
- Keeps a small in-memory tail and per-event counters for the health endpoint.
- Never raises into the quiz flow.
"""
from __future__ import annotations

import json
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Deque, Dict

from certquiz.config import get_settings

logger = logging.getLogger(__name__)

_MAX_IN_MEMORY_EVENTS = 200
_recent_events: Deque[Dict[str, Any]] = deque(maxlen=_MAX_IN_MEMORY_EVENTS)
_counters: Dict[str, int] = defaultdict(int)


@dataclass(frozen=True)
class TelemetryConfig:
    enabled: bool
    retention_days: int
    logs_dir: Path


def _get_config() -> TelemetryConfig:
    settings = get_settings()
    return TelemetryConfig(
        enabled=settings.telemetry_enabled,
        retention_days=settings.telemetry_retention_days,
        logs_dir=Path(settings.logs_dir),
    )


def _telemetry_dir(cfg: TelemetryConfig) -> Path:
    d = cfg.logs_dir / "telemetry"
    d.mkdir(parents=True, exist_ok=True)
    return d


def _event_file_path(cfg: TelemetryConfig, now_utc: datetime) -> Path:
    return _telemetry_dir(cfg) / f"events-{now_utc.date().isoformat()}.jsonl"


def _prune_old_files(cfg: TelemetryConfig) -> None:
    """Delete rotated files older than the retention window"""
    cutoff = datetime.now(timezone.utc) - timedelta(days=max(cfg.retention_days, 1))
    for p in _telemetry_dir(cfg).glob("events-*.jsonl"):
        date_part = p.name.replace("events-", "").replace(".jsonl", "")
        try:
            file_date = datetime.fromisoformat(date_part).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
        if file_date < cutoff:
            p.unlink(missing_ok=True)


def init_telemetry() -> None:
    """Create the telemetry directory and apply retention"""
    cfg = _get_config()
    if not cfg.enabled:
        logger.info("Telemetry disabled")
        return

    try:
        _prune_old_files(cfg)
    except OSError as e:
        logger.warning("Telemetry prune skipped: %s", e)
    logger.info(
        "Telemetry initialized (retention_days=%s dir=%s)",
        cfg.retention_days,
        str(cfg.logs_dir),
    )


def record_event(event: str, **fields: Any) -> None:
    """Record a summary-only telemetry event"""
    cfg = _get_config()
    if not cfg.enabled:
        return

    now_utc = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {"ts": now_utc.isoformat(), "event": event, **fields}

    _recent_events.append(payload)
    _counters[event] += 1

    try:
        path = _event_file_path(cfg, now_utc)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
    except OSError as e:
        logger.warning("Failed to write telemetry event %s: %s", event, e)


def get_telemetry_summary() -> Dict[str, Any]:
    """In-memory summary, does not scan JSONL files"""
    cfg = _get_config()
    return {
        "enabled": cfg.enabled,
        "retention_days": cfg.retention_days,
        "total_events_in_memory": len(_recent_events),
        "counters_in_memory": dict(_counters),
        "recent_events": list(_recent_events)[-10:],
    }


def reset_telemetry() -> None:
    """Clear the in-memory tail (tests)"""
    _recent_events.clear()
    _counters.clear()
