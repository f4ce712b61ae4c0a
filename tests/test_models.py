from __future__ import annotations

import pytest

from kidquiz.models import (
    ChoicePayload,
    FreeTextPayload,
    Question,
    QuestionDraft,
    QuestionType,
    Topic,
    VoicePayload,
    payload_for,
)


def test_payload_for_picks_variant():
    assert payload_for(QuestionType.YES_NO, ["Yes", "No"]) == ChoicePayload(
        ("Yes", "No")
    )
    assert payload_for(QuestionType.FILL_BLANK) == FreeTextPayload()
    assert payload_for(
        QuestionType.VOICE_INPUT, language="Telugu"
    ) == VoicePayload("Telugu")


@pytest.mark.parametrize(
    "qtype, payload, answer",
    [
        (QuestionType.MULTIPLE_CHOICE, FreeTextPayload(), "A"),
        (QuestionType.TRUE_FALSE, ChoicePayload(()), "True"),
        (QuestionType.YES_NO, ChoicePayload(("Yes", "No")), "Maybe"),
        (QuestionType.FILL_BLANK, ChoicePayload(("a",)), "a"),
        (QuestionType.VOICE_INPUT, FreeTextPayload(), "a"),
    ],
)
def test_draft_rejects_inconsistent_payload(qtype, payload, answer):
    with pytest.raises(ValueError):
        QuestionDraft(
            text="?",
            type=qtype,
            payload=payload,
            correct_answer=answer,
            fun_fact="",
        )


def test_draft_texts_cover_visible_strings():
    draft = QuestionDraft(
        text="Pick one",
        type=QuestionType.MULTIPLE_CHOICE,
        payload=ChoicePayload(("Red", "Blue")),
        correct_answer="Blue",
        fun_fact="Blue is calm.",
    )
    assert draft.texts() == ["Pick one", "Blue is calm.", "Red", "Blue"]


def test_question_record_round_trip_for_voice():
    question = Question(
        id="q1",
        topic_id="t1",
        text="What is the Telugu word for 'Milk'?",
        type=QuestionType.VOICE_INPUT,
        payload=VoicePayload("Telugu"),
        correct_answer="పాలు",
        fun_fact="Milk is called Paalu.",
    )
    record = question.to_record()
    assert record["question_type"] == "voice_input"
    assert record["options"] is None
    assert record["answer_language"] == "Telugu"
    assert Question.from_record(record) == question


def test_question_from_record_rejects_bad_options():
    with pytest.raises(ValueError):
        Question.from_record(
            {
                "id": "q1",
                "topic_id": "t1",
                "text": "?",
                "question_type": "true_false",
                "options": None,
                "correct_answer": "True",
            }
        )


def test_topic_record_without_policy():
    topic = Topic.from_record({"id": "t1", "name": "Oceans", "emoji": "x"})
    assert topic.policy is None
    assert topic.to_record()["policy"] is None
