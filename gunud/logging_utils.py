"""Structured event logging for puzzle generation and the API.

Every record is one line: ``level=... ts=... event=... key=value ...``, or a
JSON object when ``GUNUD_LOG_JSON`` is on. Loggers can be bound to context
that repeats on every record, which is how one generation run tags all of its
events with the date and seed it was built from.

Usage:
    from gunud.logging_utils import get_logger
    log = get_logger("gunud.dungeon").bind(date="2026-02-05", seed=1234)
    log.warn("generation_fallback", reason="clues_ambiguous")

``GUNUD_LOG_LEVEL`` (debug/info/warn/error) and ``GUNUD_LOG_JSON`` are read on
every call so tests and the CLI can change them at runtime. None values are
dropped; text values have spaces replaced so a record stays splittable.
"""

from __future__ import annotations

import json
import os
import sys
import time
from typing import Any, Dict, Optional

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}


def _threshold() -> int:
    return LEVELS.get(os.getenv("GUNUD_LOG_LEVEL", "info").lower(), 20)


def _json_mode() -> bool:
    return os.getenv("GUNUD_LOG_JSON", "0") in ("1", "true", "TRUE", "yes", "on")


def format_record(level: str, event: str, fields: Dict[str, Any]) -> str:
    ts = int(time.time())
    kept = {k: v for k, v in fields.items() if v is not None}
    if _json_mode():
        return json.dumps({"level": level, "ts": ts, "event": event, **kept}, separators=(",", ":"), default=str)
    parts = [f"level={level}", f"ts={ts}", f"event={event}"]
    for k, v in kept.items():
        text = v if isinstance(v, (int, float)) else str(v).replace(" ", "_")
        parts.append(f"{k}={text}")
    return " ".join(parts)


class EventLogger:
    def __init__(self, name: str, context: Optional[Dict[str, Any]] = None):
        self.name = name
        self.context = dict(context or {})

    def bind(self, **context) -> "EventLogger":
        """Child logger adding ``context`` to every record."""
        return EventLogger(self.name, {**self.context, **context})

    def _emit(self, level: str, event: str, fields: Dict[str, Any]) -> None:
        if LEVELS[level] < _threshold():
            return
        line = format_record(level, event, {"logger": self.name, **self.context, **fields})
        print(line, file=sys.stderr if level == "error" else sys.stdout)

    def debug(self, event: str, **fields):
        self._emit("debug", event, fields)

    def info(self, event: str, **fields):
        self._emit("info", event, fields)

    def warn(self, event: str, **fields):
        self._emit("warn", event, fields)

    def error(self, event: str, **fields):
        self._emit("error", event, fields)


_LOGGERS: Dict[str, EventLogger] = {}


def get_logger(name: str) -> EventLogger:
    if name not in _LOGGERS:
        _LOGGERS[name] = EventLogger(name)
    return _LOGGERS[name]
