"""Structured logging utilities for interview sessions."""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview_prep.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"

_logger = logging.getLogger("interview_prep.events")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False


def _is_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _rotating(path: str, formatter: logging.Formatter, *, json_lines: bool) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
    )
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter)
    if json_lines:
        handler.addFilter(_is_json)
    else:
        handler.addFilter(lambda record: not _is_json(record))
    return handler


def _ensure_handlers() -> None:
    if _logger.handlers:
        return

    human = logging.Formatter(HUMAN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # Console gets human-readable lines only
    console = logging.StreamHandler(stream=sys.stdout)
    console.setLevel(LOG_LEVEL)
    console.setFormatter(human)
    console.addFilter(lambda record: not _is_json(record))
    _logger.addHandler(console)

    if not ENABLE_FILE_LOGS:
        return

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    stem = LOG_FILE[:-4] if LOG_FILE.endswith(".log") else LOG_FILE
    _logger.addHandler(_rotating(LOG_FILE, logging.Formatter("%(message)s"), json_lines=True))
    _logger.addHandler(_rotating(f"{stem}-human.log", human, json_lines=False))


def _format_human(evt: dict[str, Any]) -> str:
    base = f"session={evt.get('session_id')} kind={evt.get('kind')}"
    extras = [
        f"{key}={evt[key]}"
        for key in ("mode", "phase", "round_trips", "score", "source", "ms", "outcome")
        if key in evt
    ]
    return base + (" " + " ".join(extras) if extras else "")


def _emit(message: str, level: int, *, is_json: bool) -> None:
    record = _logger.makeRecord(
        name=_logger.name,
        level=level,
        fn="",
        lno=0,
        msg=message,
        args=(),
        exc_info=None,
    )
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, session_id: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Emit one session event as a human line and, when file logs are on, a JSON line."""

    _ensure_handlers()

    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": str(uuid.uuid4()),
        "kind": kind,
        "session_id": session_id,
    }
    payload.update(fields)

    _emit(_format_human(payload), level, is_json=False)
    if ENABLE_FILE_LOGS:
        _emit(json.dumps(payload, ensure_ascii=False, default=str), level, is_json=True)


__all__ = ["log_event"]
