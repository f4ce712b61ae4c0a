"""Topic and question records.

A question's answer modality is carried by a payload variant instead of an
optional ``options`` field: choice questions hold a ``ChoicePayload``, typed
answers a ``FreeTextPayload`` and spoken answers a ``VoicePayload``. The
constructors reject any combination that breaks the options/type rules, so a
``Question`` that exists is a valid one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union

__all__ = [
    "CHOICE_TYPES",
    "ChoicePayload",
    "FreeTextPayload",
    "Question",
    "QuestionDraft",
    "QuestionPayload",
    "QuestionType",
    "Topic",
    "VoicePayload",
    "payload_for",
]


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    YES_NO = "yes_no"
    FILL_BLANK = "fill_blank"
    VOICE_INPUT = "voice_input"


CHOICE_TYPES = frozenset(
    {QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE, QuestionType.YES_NO}
)


@dataclass(frozen=True)
class ChoicePayload:
    """Options shown verbatim as buttons."""

    options: tuple[str, ...]


@dataclass(frozen=True)
class FreeTextPayload:
    """Typed answer, no options."""


@dataclass(frozen=True)
class VoicePayload:
    """Spoken answer, transcribed before evaluation."""

    language: str | None = None


QuestionPayload = Union[ChoicePayload, FreeTextPayload, VoicePayload]


def payload_for(
    qtype: QuestionType,
    options: Any = None,
    *,
    language: str | None = None,
) -> QuestionPayload:
    """Build the payload variant required by ``qtype``."""

    if qtype in CHOICE_TYPES:
        return ChoicePayload(tuple(options or ()))
    if qtype is QuestionType.FILL_BLANK:
        return FreeTextPayload()
    return VoicePayload(language)


def _check_payload(
    qtype: QuestionType, payload: QuestionPayload, correct_answer: str
) -> None:
    if qtype in CHOICE_TYPES:
        if not isinstance(payload, ChoicePayload):
            raise ValueError(f"{qtype.value} questions need options")
        if not payload.options:
            raise ValueError(f"{qtype.value} options must not be empty")
        if correct_answer not in payload.options:
            raise ValueError("correct_answer must match one of the options")
    elif qtype is QuestionType.FILL_BLANK:
        if not isinstance(payload, FreeTextPayload):
            raise ValueError("fill_blank questions take no options")
    elif not isinstance(payload, VoicePayload):
        raise ValueError("voice_input questions take no options")


@dataclass(frozen=True)
class Topic:
    """A named subject area. ``policy`` names its generation policy."""

    id: str
    name: str
    emoji: str
    policy: str | None = None

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "emoji": self.emoji,
            "policy": self.policy,
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "Topic":
        policy = data.get("policy")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            emoji=str(data.get("emoji", "")),
            policy=str(policy) if policy else None,
        )


@dataclass(frozen=True)
class QuestionDraft:
    """A question that has not been stored yet."""

    text: str
    type: QuestionType
    payload: QuestionPayload
    correct_answer: str
    fun_fact: str
    difficulty: int = 1

    def __post_init__(self) -> None:
        _check_payload(self.type, self.payload, self.correct_answer)

    @property
    def options(self) -> tuple[str, ...] | None:
        if isinstance(self.payload, ChoicePayload):
            return self.payload.options
        return None

    def texts(self) -> list[str]:
        """Every learner-visible string, for content screening."""

        return [self.text, self.fun_fact, *(self.options or ())]


@dataclass(frozen=True)
class Question:
    """A stored question. Never mutated; regeneration replaces the batch."""

    id: str
    topic_id: str
    text: str
    type: QuestionType
    payload: QuestionPayload
    correct_answer: str
    fun_fact: str
    difficulty: int = 1

    def __post_init__(self) -> None:
        _check_payload(self.type, self.payload, self.correct_answer)

    @property
    def options(self) -> tuple[str, ...] | None:
        if isinstance(self.payload, ChoicePayload):
            return self.payload.options
        return None

    @classmethod
    def from_draft(
        cls, draft: QuestionDraft, *, id: str, topic_id: str
    ) -> "Question":
        return cls(
            id=id,
            topic_id=topic_id,
            text=draft.text,
            type=draft.type,
            payload=draft.payload,
            correct_answer=draft.correct_answer,
            fun_fact=draft.fun_fact,
            difficulty=draft.difficulty,
        )

    def to_record(self) -> dict[str, object]:
        options = self.options
        record: dict[str, object] = {
            "id": self.id,
            "topic_id": self.topic_id,
            "text": self.text,
            "question_type": self.type.value,
            "options": list(options) if options is not None else None,
            "correct_answer": self.correct_answer,
            "fun_fact": self.fun_fact,
            "difficulty": self.difficulty,
        }
        if isinstance(self.payload, VoicePayload) and self.payload.language:
            record["answer_language"] = self.payload.language
        return record

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> "Question":
        qtype = QuestionType(data["question_type"])
        payload = payload_for(
            qtype, data.get("options"), language=data.get("answer_language")
        )
        return cls(
            id=str(data["id"]),
            topic_id=str(data["topic_id"]),
            text=str(data["text"]),
            type=qtype,
            payload=payload,
            correct_answer=str(data["correct_answer"]),
            fun_fact=str(data.get("fun_fact") or ""),
            difficulty=int(data.get("difficulty") or 1),
        )
