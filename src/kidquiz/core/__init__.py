"""Core shared helpers for kidquiz commands."""

from __future__ import annotations

from .ai import load_client
from .config import (
    ConfigError,
    KidQuizConfig,
    load_config,
    write_template,
)
from .logging import JsonLogFormatter, configure_logger

__all__ = [
    "load_client",
    "ConfigError",
    "KidQuizConfig",
    "load_config",
    "write_template",
    "configure_logger",
    "JsonLogFormatter",
]
