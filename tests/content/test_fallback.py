from __future__ import annotations

from dataclasses import replace

import pytest

from kidquiz.content.fallback import build_fallback, match_category
from kidquiz.content.policy import GENERAL, VOCABULARY, default_policies
from kidquiz.content.safety import is_safe
from kidquiz.models import CHOICE_TYPES, QuestionType


@pytest.mark.parametrize(
    "name, category",
    [
        ("Math Fun", "arithmetic"),
        ("Counting to 20", "arithmetic"),
        ("Animals of Africa", "biology"),
        ("Weather", "earth_science"),
        ("Space and Planets", "earth_science"),
        ("World Maps", "geography"),
        ("Knights and Castles", None),
    ],
)
def test_match_category(name, category):
    assert match_category(name) == category


@pytest.mark.parametrize(
    "topic", ["Math Fun", "Animals", "Weather", "Countries", "Castles"]
)
def test_general_fallback_has_ten_valid_items(topic):
    policy = default_policies()[GENERAL]
    drafts = build_fallback(topic, policy)

    assert len(drafts) == 10
    for draft in drafts:
        assert draft.type in policy.question_types
        if draft.type in CHOICE_TYPES:
            assert draft.options
            assert draft.correct_answer in draft.options
        else:
            assert draft.options is None
        assert all(is_safe(text) for text in draft.texts())


def test_vocabulary_fallback_is_five_telugu_voice_items():
    policy = default_policies()[VOCABULARY]
    drafts = build_fallback("Telugu Words", policy)

    assert len(drafts) == 5
    assert {d.type for d in drafts} == {QuestionType.VOICE_INPUT}
    assert all(d.options is None for d in drafts)
    assert drafts[0].correct_answer == "నీరు"
    assert drafts[0].payload.language == "Telugu"


def test_generic_fallback_mentions_topic():
    drafts = build_fallback("Castles", default_policies()[GENERAL])
    assert "Castles" in drafts[0].text
    blank = next(d for d in drafts if d.type is QuestionType.FILL_BLANK)
    assert blank.correct_answer == "Castles"


def test_fallback_is_deterministic():
    policy = default_policies()[GENERAL]
    assert build_fallback("Weather", policy) == build_fallback(
        "Weather", policy
    )


def test_fallback_follows_batch_size_and_types():
    policy = replace(
        default_policies()[GENERAL],
        batch_size=12,
        question_types=(QuestionType.TRUE_FALSE,),
    )
    drafts = build_fallback("Math", policy)
    assert len(drafts) == 12
    assert {d.type for d in drafts} == {QuestionType.TRUE_FALSE}
