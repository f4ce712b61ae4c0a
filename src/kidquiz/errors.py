"""Error taxonomy shared by the content pipeline and quiz sessions."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "QuizError",
    "NotFoundError",
    "GenerationError",
    "InvalidGenerationFormatError",
    "UnsafeContentError",
    "GenerationServiceError",
    "PersistenceFailedError",
    "NoQuestionsError",
    "StoreError",
    "TranscriptionEmptyError",
    "TranscriptionServiceError",
    "SessionStateError",
]


class QuizError(RuntimeError):
    """Base class for kidquiz domain errors."""


class NotFoundError(QuizError):
    """Raised when a topic or question id does not resolve."""


class GenerationError(QuizError):
    """Recoverable content-generation failure.

    The orchestrator answers every subclass by switching to the fallback
    question bank; these never escape ``regenerate_topic``.
    """


class InvalidGenerationFormatError(GenerationError):
    """The generated payload is not a well-formed batch."""


class UnsafeContentError(GenerationError):
    """At least one generated item tripped the child-safety filter."""

    def __init__(self, message: str, *, flagged: Sequence[tuple[int, str]] = ()):
        super().__init__(message)
        self.flagged = list(flagged)


class GenerationServiceError(GenerationError):
    """The generative text service was unreachable or unusable."""


class StoreError(QuizError):
    """Raised by record stores when reads or writes fail."""


class PersistenceFailedError(QuizError):
    """A freshly built batch could not be inserted. Not retried."""


class NoQuestionsError(QuizError):
    """The topic has no stored questions; regenerate before starting."""


class TranscriptionEmptyError(QuizError):
    """The speech service heard nothing. The learner may try again."""


class TranscriptionServiceError(QuizError):
    """The speech service failed or the audio payload was unusable."""


class SessionStateError(QuizError):
    """An action is not allowed in the session's current state."""
