"""Logging setup for kidquiz commands.

Each command logs to ``<log_dir>/<name>.log`` as JSON lines so generation
fallbacks and session results can be inspected after the fact. ``verbose``
adds a plain stderr handler for interactive debugging.
"""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "ConsoleHandler",
    "JsonLogFormatter",
    "QuizLogFileHandler",
    "configure_logger",
]

_SCRATCH_DIR = Path(tempfile.gettempdir()) / "kidquiz-logs"

# Attributes every LogRecord carries; anything else came in via ``extra``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
}


class QuizLogFileHandler(RotatingFileHandler):
    """Rotating JSON file handler owned by ``configure_logger``."""


class ConsoleHandler(logging.StreamHandler):
    """Stderr handler added when ``verbose`` is on."""


class JsonLogFormatter(logging.Formatter):
    """Render a record and its ``extra`` fields as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Return ``(logger, log_file)`` for ``name``.

    Calling again with the same target keeps the existing file handler;
    a different target swaps it. When ``log_dir`` cannot be created or
    written the log goes to a ``kidquiz-logs`` folder in the temp dir.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    log_name = filename or f"{name.rsplit('.', 1)[-1]}.log"
    handler = _file_handler(
        logger, Path(log_dir) / log_name, max_bytes, backup_count
    )
    handler.setLevel(logging.DEBUG if verbose else _level_number(level))

    consoles = [h for h in logger.handlers if isinstance(h, ConsoleHandler)]
    if verbose and not consoles:
        console = ConsoleHandler(stream=sys.stderr)
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        logger.addHandler(console)
    elif not verbose:
        for console in consoles:
            logger.removeHandler(console)
            console.close()

    return logger, Path(handler.baseFilename)


def _level_number(level: str) -> int:
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def _file_handler(
    logger: logging.Logger, path: Path, max_bytes: int, backup_count: int
) -> QuizLogFileHandler:
    for existing in logger.handlers:
        if not isinstance(existing, QuizLogFileHandler):
            continue
        if Path(existing.baseFilename) == path.resolve():
            return existing
        logger.removeHandler(existing)
        existing.close()
        break

    for candidate in (path, _SCRATCH_DIR / path.name):
        try:
            candidate.parent.mkdir(parents=True, exist_ok=True)
            handler = QuizLogFileHandler(
                candidate,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except PermissionError:
            if candidate.parent == _SCRATCH_DIR:
                raise
            continue
        break
    handler.setFormatter(JsonLogFormatter())
    logger.addHandler(handler)
    return handler


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return _jsonable(value.value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return repr(value)
