from __future__ import annotations

import json

import pytest

from kidquiz.errors import StoreError
from kidquiz.models import QuestionDraft, QuestionType, payload_for
from kidquiz.store import JsonlRecordStore, read_jsonl


def _drafts(count):
    return [
        QuestionDraft(
            text=f"Question {idx}",
            type=QuestionType.FILL_BLANK,
            payload=payload_for(QuestionType.FILL_BLANK),
            correct_answer=str(idx),
            fun_fact="",
        )
        for idx in range(count)
    ]


def test_topics_round_trip(store):
    created = store.insert_topic("Oceans", "\U0001F30A", "general")
    assert store.select_topic(created.id) == created
    assert store.list_topics() == [created]
    assert store.select_topic("missing") is None


def test_insert_and_select_questions_in_order(store, science_topic):
    inserted = store.insert_questions(science_topic.id, _drafts(4))
    selected = store.select_questions(science_topic.id)
    assert [q.id for q in selected] == [q.id for q in inserted]
    assert [q.text for q in store.select_questions(science_topic.id, limit=2)] == [
        "Question 0",
        "Question 1",
    ]


def test_delete_questions_is_scoped_and_idempotent(
    store, science_topic, telugu_topic
):
    store.insert_questions(science_topic.id, _drafts(3))
    store.insert_questions(telugu_topic.id, _drafts(2))

    assert store.delete_questions(science_topic.id) == 3
    assert store.delete_questions(science_topic.id) == 0
    assert store.select_questions(science_topic.id) == []
    assert len(store.select_questions(telugu_topic.id)) == 2


def test_files_are_jsonl(store, science_topic):
    store.insert_questions(science_topic.id, _drafts(1))
    records = read_jsonl(store.questions_path)
    assert records[0]["topic_id"] == science_topic.id
    assert records[0]["question_type"] == "fill_blank"


def test_corrupt_file_raises_store_error(tmp_path):
    store = JsonlRecordStore(tmp_path)
    store.topics_path.write_text("{not json}\n", encoding="utf-8")
    with pytest.raises(StoreError):
        store.list_topics()


def test_malformed_question_record_raises_store_error(store, science_topic):
    store.root.mkdir(parents=True, exist_ok=True)
    store.questions_path.write_text(
        json.dumps(
            {
                "id": "q1",
                "topic_id": science_topic.id,
                "text": "?",
                "question_type": "essay",
                "correct_answer": "x",
            }
        )
        + "\n",
        encoding="utf-8",
    )
    with pytest.raises(StoreError):
        store.select_questions(science_topic.id)


@pytest.mark.parametrize(
    "raw",
    [
        b'{"id": "x", "topic_id": "\xff\xfe"}\n',
        b"[1, 2]\n",
        b'"just a string"\n',
    ],
)
def test_unreadable_question_file_raises_store_error(
    store, science_topic, raw
):
    store.questions_path.write_bytes(raw)
    with pytest.raises(StoreError):
        store.delete_questions(science_topic.id)
    with pytest.raises(StoreError):
        store.select_questions(science_topic.id)


def test_undecodable_topic_file_raises_store_error(tmp_path):
    store = JsonlRecordStore(tmp_path)
    store.topics_path.write_bytes(b'{"id": "t1", "name": "\xff"}\n')
    with pytest.raises(StoreError):
        store.select_topic("t1")


def test_topic_record_without_id_raises_store_error(tmp_path):
    store = JsonlRecordStore(tmp_path)
    store.topics_path.write_text(
        json.dumps({"name": "Space", "emoji": "\U0001F680"}) + "\n",
        encoding="utf-8",
    )
    with pytest.raises(StoreError):
        store.list_topics()
