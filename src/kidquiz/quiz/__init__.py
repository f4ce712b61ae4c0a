"""Answer evaluation and quiz sessions."""

from .console import run_quiz_session
from .evaluator import evaluate, normalize_free_text
from .session import (
    AnswerAttempt,
    AnswerFeedback,
    QuizSession,
    SessionController,
    SessionState,
    SessionSummary,
)

__all__ = [
    "run_quiz_session",
    "evaluate",
    "normalize_free_text",
    "AnswerAttempt",
    "AnswerFeedback",
    "QuizSession",
    "SessionController",
    "SessionState",
    "SessionSummary",
]
