"""Grade a single answer against a stored question."""

from __future__ import annotations

from ..models import CHOICE_TYPES, Question

__all__ = ["evaluate", "normalize_free_text"]


def normalize_free_text(text: str) -> str:
    return text.strip().lower()


def evaluate(question: Question, raw_input: str) -> bool:
    """Return whether ``raw_input`` answers ``question`` correctly.

    Choice answers must match the option label exactly after trimming, so
    ``"true"`` does not answer a ``"True"`` button. Typed and spoken answers
    ignore surrounding whitespace and case, but spelling must match.
    """

    if question.type in CHOICE_TYPES:
        return raw_input.strip() == question.correct_answer.strip()
    return normalize_free_text(raw_input) == normalize_free_text(
        question.correct_answer
    )
