from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
SRC = str(ROOT / "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from kidquiz.models import Topic  # noqa: E402
from kidquiz.store import JsonlRecordStore  # noqa: E402


@pytest.fixture
def store(tmp_path: Path) -> JsonlRecordStore:
    """A record store rooted in pytest's per-test tmp directory."""

    return JsonlRecordStore(tmp_path / "data")


@pytest.fixture
def science_topic(store: JsonlRecordStore) -> Topic:
    return store.insert_topic("Science", "\U0001F52C", "general")


@pytest.fixture
def telugu_topic(store: JsonlRecordStore) -> Topic:
    return store.insert_topic("Telugu Words", "\U0001F5E3", "vocabulary")


@pytest.fixture
def test_logger() -> logging.Logger:
    """A propagating logger so ``caplog`` sees structured events."""

    logger = logging.getLogger("kidquiz_tests")
    logger.setLevel(logging.DEBUG)
    return logger
