"""Per-topic question generation with validation, screening and fallback.

``ContentOrchestrator.generate`` turns one topic id into exactly one stored
batch: ask the model, check the shape, screen the text, swap in the static
bank on any generation problem, then replace the topic's questions.

Two regenerations of the same topic running at once can interleave their
delete and insert steps and leave a mixed or empty batch. Regeneration is an
admin action and is expected to run one at a time per topic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional, Sequence

from ..errors import (
    GenerationError,
    InvalidGenerationFormatError,
    NotFoundError,
    PersistenceFailedError,
    StoreError,
    UnsafeContentError,
)
from ..models import (
    CHOICE_TYPES,
    Question,
    QuestionDraft,
    QuestionType,
    Topic,
    payload_for,
)
from ..store import RecordStore
from .fallback import build_fallback
from .generator import GenerationClient
from .policy import GenerationPolicy, default_policies, resolve_policy
from .safety import SafetyFilter

__all__ = [
    "ContentOrchestrator",
    "GenerationResult",
    "screen_batch",
    "validate_batch",
]

BatchSource = Literal["generated", "fallback"]

_REQUIRED_FIELDS = ("text", "type", "options", "correct_answer", "fun_fact")
_FIELD_ALIASES = {"correctAnswer": "correct_answer", "funFact": "fun_fact"}


@dataclass(frozen=True)
class GenerationResult:
    topic_id: str
    topic_name: str
    questions: list[Question]
    source: BatchSource

    @property
    def questions_generated(self) -> int:
        return len(self.questions)


def _normalize_keys(item: Mapping[str, Any]) -> dict[str, Any]:
    return {_FIELD_ALIASES.get(key, key): value for key, value in item.items()}


def _require_text(value: Any, *, field: str, index: int) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidGenerationFormatError(
            f"Item {index}: '{field}' must be a non-empty string"
        )
    return value


def _validate_item(
    item: Any, policy: GenerationPolicy, index: int
) -> QuestionDraft:
    if not isinstance(item, Mapping):
        raise InvalidGenerationFormatError(f"Item {index} is not an object")
    data = _normalize_keys(item)
    missing = [name for name in _REQUIRED_FIELDS if name not in data]
    if missing:
        raise InvalidGenerationFormatError(
            f"Item {index} is missing {', '.join(missing)}"
        )

    text = _require_text(data["text"], field="text", index=index)
    fun_fact = _require_text(data["fun_fact"], field="fun_fact", index=index)
    answer = _require_text(
        data["correct_answer"], field="correct_answer", index=index
    )
    try:
        qtype = QuestionType(data["type"])
    except ValueError as exc:
        raise InvalidGenerationFormatError(
            f"Item {index}: unknown type {data['type']!r}"
        ) from exc
    if qtype not in policy.question_types:
        raise InvalidGenerationFormatError(
            f"Item {index}: type {qtype.value} not allowed by the "
            f"{policy.name} policy"
        )

    options = data["options"]
    if qtype in CHOICE_TYPES:
        if not isinstance(options, list) or not options:
            raise InvalidGenerationFormatError(
                f"Item {index}: {qtype.value} needs a non-empty options list"
            )
        if not all(isinstance(opt, str) and opt.strip() for opt in options):
            raise InvalidGenerationFormatError(
                f"Item {index}: options must be non-empty strings"
            )
        if answer not in options:
            raise InvalidGenerationFormatError(
                f"Item {index}: correct_answer is not one of the options"
            )
    elif options is not None:
        raise InvalidGenerationFormatError(
            f"Item {index}: {qtype.value} must have options set to null"
        )
    if (
        qtype is QuestionType.VOICE_INPUT
        and policy.answer_language
        and answer.isascii()
    ):
        # A transliterated answer can never match a native-script transcript.
        raise InvalidGenerationFormatError(
            f"Item {index}: correct_answer must be written in "
            f"{policy.answer_language} script"
        )

    return QuestionDraft(
        text=text.strip(),
        type=qtype,
        payload=payload_for(qtype, options, language=policy.answer_language),
        correct_answer=answer,
        fun_fact=fun_fact.strip(),
    )


def validate_batch(raw: Any, policy: GenerationPolicy) -> list[QuestionDraft]:
    """Check a parsed model reply and convert it into drafts.

    The batch is rejected as a whole: one malformed item, or the wrong item
    count, raises ``InvalidGenerationFormatError``.
    """

    if not isinstance(raw, list):
        raise InvalidGenerationFormatError("Generated batch is not an array")
    if len(raw) != policy.batch_size:
        raise InvalidGenerationFormatError(
            f"Expected {policy.batch_size} questions, got {len(raw)}"
        )
    return [_validate_item(item, policy, idx) for idx, item in enumerate(raw)]


def screen_batch(
    drafts: Sequence[QuestionDraft], safety: SafetyFilter
) -> None:
    """Raise ``UnsafeContentError`` if any visible text hits the deny-list."""

    flagged: list[tuple[int, str]] = []
    for idx, draft in enumerate(drafts):
        for text in draft.texts():
            flagged.extend((idx, term) for term in safety.matches(text))
    if flagged:
        raise UnsafeContentError(
            f"{len({idx for idx, _ in flagged})} item(s) failed the "
            "child-safety filter",
            flagged=flagged,
        )


class ContentOrchestrator:
    """Generate and persist one topic's question batch."""

    def __init__(
        self,
        store: RecordStore,
        generator: GenerationClient,
        *,
        policies: Optional[Mapping[str, GenerationPolicy]] = None,
        safety: Optional[SafetyFilter] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.store = store
        self.generator = generator
        self.policies = dict(policies or default_policies())
        self.safety = safety or SafetyFilter()
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, topic_id: str) -> GenerationResult:
        """Replace ``topic_id``'s questions with a fresh batch.

        Raises ``NotFoundError`` for an unknown topic and
        ``PersistenceFailedError`` when the new batch cannot be stored.
        Generation problems never escape; they switch to the fallback bank.
        """

        topic = self.store.select_topic(topic_id)
        if topic is None:
            raise NotFoundError(f"Topic not found: {topic_id}")

        policy, inferred = resolve_policy(topic, self.policies)
        if inferred:
            self.logger.info(
                "Inferred generation policy from topic name",
                extra={"topic_id": topic.id, "policy": policy.name},
            )
        self.logger.info(
            "Generating questions",
            extra={
                "topic_id": topic.id,
                "topic_name": topic.name,
                "policy": policy.name,
                "batch_size": policy.batch_size,
            },
        )

        source: BatchSource = "generated"
        try:
            drafts = self._generate_batch(topic, policy)
        except GenerationError as exc:
            self.logger.warning(
                "Falling back to static question bank",
                extra={
                    "topic_id": topic.id,
                    "reason": type(exc).__name__,
                    "detail": str(exc),
                },
            )
            drafts = self._fallback_batch(topic, policy)
            source = "fallback"

        questions = self._replace_questions(topic, drafts)
        self.logger.info(
            "Stored question batch",
            extra={
                "topic_id": topic.id,
                "source": source,
                "questions_generated": len(questions),
            },
        )
        return GenerationResult(
            topic_id=topic.id,
            topic_name=topic.name,
            questions=questions,
            source=source,
        )

    regenerate_topic = generate

    def _generate_batch(
        self, topic: Topic, policy: GenerationPolicy
    ) -> list[QuestionDraft]:
        raw = self.generator.generate(topic.name, policy)
        drafts = validate_batch(raw, policy)
        if policy.screen_generated:
            try:
                screen_batch(drafts, self.safety)
            except UnsafeContentError as exc:
                self.logger.error(
                    "Generated content failed child-safety screening",
                    extra={"topic_id": topic.id, "flagged": exc.flagged},
                )
                raise
        return drafts

    def _fallback_batch(
        self, topic: Topic, policy: GenerationPolicy
    ) -> list[QuestionDraft]:
        drafts = build_fallback(topic.name, policy)
        if policy.screen_fallback:
            try:
                screen_batch(drafts, self.safety)
            except UnsafeContentError as exc:
                # Static content is stored regardless; the flag is an audit.
                self.logger.error(
                    "Fallback content matched the deny-list",
                    extra={"topic_id": topic.id, "flagged": exc.flagged},
                )
        return drafts

    def _replace_questions(
        self, topic: Topic, drafts: Sequence[QuestionDraft]
    ) -> list[Question]:
        try:
            removed = self.store.delete_questions(topic.id)
        except StoreError as exc:
            self.logger.warning(
                "Could not delete existing questions; inserting anyway",
                extra={"topic_id": topic.id, "detail": str(exc)},
            )
        else:
            self.logger.debug(
                "Deleted existing questions",
                extra={"topic_id": topic.id, "removed": removed},
            )
        try:
            return self.store.insert_questions(topic.id, drafts)
        except StoreError as exc:
            self.logger.error(
                "Failed to store question batch",
                extra={"topic_id": topic.id, "detail": str(exc)},
            )
            raise PersistenceFailedError(
                f"Failed to save questions for topic {topic.id}"
            ) from exc
