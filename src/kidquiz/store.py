"""Record store for topics and questions.

The content pipeline and quiz sessions only rely on the ``RecordStore``
protocol. ``JsonlRecordStore`` is the bundled implementation: one JSON
object per line in ``topics.jsonl`` and ``questions.jsonl`` under a data
directory.
"""

from __future__ import annotations

import json
import os
import tempfile
import uuid
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Sequence

from .errors import StoreError
from .models import Question, QuestionDraft, Topic

__all__ = [
    "JsonlRecordStore",
    "RecordStore",
    "read_jsonl",
    "write_jsonl",
]


class RecordStore(Protocol):
    def select_topic(self, topic_id: str) -> Optional[Topic]: ...

    def list_topics(self) -> List[Topic]: ...

    def insert_topic(
        self, name: str, emoji: str, policy: Optional[str]
    ) -> Topic: ...

    def delete_questions(self, topic_id: str) -> int: ...

    def insert_questions(
        self, topic_id: str, batch: Sequence[QuestionDraft]
    ) -> List[Question]: ...

    def select_questions(
        self, topic_id: str, limit: Optional[int] = None
    ) -> List[Question]: ...


def read_jsonl(path: Path) -> List[dict]:
    data: List[dict] = []
    with Path(path).open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            data.append(json.loads(line))
    return data


def write_jsonl(path: Path, records: Iterable[dict]) -> None:
    """Replace ``path`` with ``records`` via a temp file in the same dir."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{p.name}.", suffix=".tmp", dir=p.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            for rec in records:
                fh.write(json.dumps(rec, ensure_ascii=False))
                fh.write("\n")
        os.replace(tmp_name, p)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonlRecordStore:
    """File-backed store; each mutation rewrites the affected file."""

    TOPICS_FILE = "topics.jsonl"
    QUESTIONS_FILE = "questions.jsonl"

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @property
    def topics_path(self) -> Path:
        return self.root / self.TOPICS_FILE

    @property
    def questions_path(self) -> Path:
        return self.root / self.QUESTIONS_FILE

    def _read(self, path: Path) -> List[dict]:
        if not path.exists():
            return []
        try:
            records = read_jsonl(path)
        except (OSError, ValueError) as exc:
            # ValueError covers JSONDecodeError and UnicodeDecodeError.
            raise StoreError(f"Failed to read {path}: {exc}") from exc
        for lineno, rec in enumerate(records, start=1):
            if not isinstance(rec, dict):
                raise StoreError(
                    f"Failed to read {path}: record {lineno} is not an object"
                )
        return records

    def _topic(self, rec: dict) -> Topic:
        try:
            return Topic.from_record(rec)
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreError(
                f"Malformed topic record {rec.get('id')!r}: {exc}"
            ) from exc

    def _write(self, path: Path, records: Iterable[dict]) -> None:
        try:
            write_jsonl(path, records)
        except (OSError, TypeError, ValueError) as exc:
            raise StoreError(f"Failed to write {path}: {exc}") from exc

    def select_topic(self, topic_id: str) -> Optional[Topic]:
        for rec in self._read(self.topics_path):
            if str(rec.get("id")) == topic_id:
                return self._topic(rec)
        return None

    def list_topics(self) -> List[Topic]:
        return [self._topic(rec) for rec in self._read(self.topics_path)]

    def insert_topic(
        self, name: str, emoji: str, policy: Optional[str] = None
    ) -> Topic:
        topic = Topic(id=uuid.uuid4().hex, name=name, emoji=emoji, policy=policy)
        records = self._read(self.topics_path)
        records.append(topic.to_record())
        self._write(self.topics_path, records)
        return topic

    def delete_questions(self, topic_id: str) -> int:
        records = self._read(self.questions_path)
        kept = [rec for rec in records if rec.get("topic_id") != topic_id]
        removed = len(records) - len(kept)
        if removed:
            self._write(self.questions_path, kept)
        return removed

    def insert_questions(
        self, topic_id: str, batch: Sequence[QuestionDraft]
    ) -> List[Question]:
        inserted = [
            Question.from_draft(draft, id=uuid.uuid4().hex, topic_id=topic_id)
            for draft in batch
        ]
        records = self._read(self.questions_path)
        records.extend(question.to_record() for question in inserted)
        self._write(self.questions_path, records)
        return inserted

    def select_questions(
        self, topic_id: str, limit: Optional[int] = None
    ) -> List[Question]:
        out: List[Question] = []
        for rec in self._read(self.questions_path):
            if rec.get("topic_id") != topic_id:
                continue
            try:
                out.append(Question.from_record(rec))
            except (KeyError, TypeError, ValueError) as exc:
                raise StoreError(
                    f"Malformed question record {rec.get('id')!r}: {exc}"
                ) from exc
            if limit is not None and len(out) >= limit:
                break
        return out
