"""Generation policies: batch size, answer types and screening per topic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from ..core.config import PolicyConfig
from ..models import QuestionType, Topic

__all__ = [
    "GENERAL",
    "VOCABULARY",
    "GenerationPolicy",
    "default_policies",
    "infer_policy_name",
    "policies_from_config",
    "resolve_policy",
]

GENERAL = "general"
VOCABULARY = "vocabulary"


@dataclass(frozen=True)
class GenerationPolicy:
    name: str
    batch_size: int
    question_types: tuple[QuestionType, ...]
    answer_language: Optional[str] = None
    keywords: tuple[str, ...] = ()
    screen_generated: bool = True
    screen_fallback: bool = False

    @property
    def is_voice_only(self) -> bool:
        return self.question_types == (QuestionType.VOICE_INPUT,)


def default_policies() -> dict[str, GenerationPolicy]:
    return {
        GENERAL: GenerationPolicy(
            name=GENERAL,
            batch_size=10,
            question_types=(
                QuestionType.MULTIPLE_CHOICE,
                QuestionType.TRUE_FALSE,
                QuestionType.FILL_BLANK,
                QuestionType.YES_NO,
            ),
        ),
        VOCABULARY: GenerationPolicy(
            name=VOCABULARY,
            batch_size=5,
            question_types=(QuestionType.VOICE_INPUT,),
            answer_language="Telugu",
            keywords=("telugu",),
        ),
    }


def policies_from_config(
    section: Mapping[str, PolicyConfig],
) -> dict[str, GenerationPolicy]:
    return {
        name: GenerationPolicy(
            name=name,
            batch_size=cfg.batch_size,
            question_types=tuple(QuestionType(t) for t in cfg.question_types),
            answer_language=cfg.answer_language,
            keywords=tuple(k.lower() for k in cfg.keywords),
            screen_generated=cfg.screen_generated,
            screen_fallback=cfg.screen_fallback,
        )
        for name, cfg in section.items()
    }


def infer_policy_name(
    topic_name: str, policies: Mapping[str, GenerationPolicy]
) -> str:
    """Pick a policy by keyword. Used when a topic is created."""

    lowered = topic_name.lower()
    for name, policy in policies.items():
        if any(keyword in lowered for keyword in policy.keywords):
            return name
    return GENERAL


def resolve_policy(
    topic: Topic, policies: Mapping[str, GenerationPolicy]
) -> tuple[GenerationPolicy, bool]:
    """Return the topic's policy and whether it had to be inferred.

    Topics created before policies were stored carry no ``policy``; those
    (and topics naming a policy that is no longer configured) fall back to
    keyword inference.
    """

    if topic.policy and topic.policy in policies:
        return policies[topic.policy], False
    return policies[infer_policy_name(topic.name, policies)], True
