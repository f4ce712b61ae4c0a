"""Quiz session state machine.

A session moves ``LOADING -> IN_PROGRESS -> REVEALED -> IN_PROGRESS -> ...
-> COMPLETED``. Each question accepts exactly one graded submission; once
revealed it is locked until the learner advances. Sessions live in memory
only and a finished one is never reset: starting over means a new session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from ..errors import NoQuestionsError, NotFoundError, SessionStateError
from ..models import Question, Topic
from ..store import RecordStore
from ..transcription import TranscriptionClient
from .evaluator import evaluate

__all__ = [
    "AnswerAttempt",
    "AnswerFeedback",
    "QuizSession",
    "SessionController",
    "SessionState",
    "SessionSummary",
    "result_message",
]

DEFAULT_QUESTION_LIMIT = 10


class SessionState(str, Enum):
    LOADING = "loading"
    IN_PROGRESS = "in_progress"
    REVEALED = "revealed"
    COMPLETED = "completed"


@dataclass(frozen=True)
class AnswerAttempt:
    """The graded submission for the current question."""

    question_id: str
    raw_input: str
    is_correct: bool


@dataclass(frozen=True)
class AnswerFeedback:
    is_correct: bool
    correct_answer: str
    fun_fact: str


@dataclass(frozen=True)
class SessionSummary:
    topic_name: str
    score: int
    total: int
    message: str

    @property
    def percentage(self) -> int:
        if self.total == 0:
            return 0
        return round(self.score * 100 / self.total)


@dataclass
class QuizSession:
    """Mutable state for one learner's pass through a topic."""

    topic: Topic
    questions: list[Question] = field(default_factory=list)
    current_index: int = 0
    score: int = 0
    state: SessionState = SessionState.LOADING
    last_attempt: AnswerAttempt | None = None

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Question | None:
        if self.state in (SessionState.IN_PROGRESS, SessionState.REVEALED):
            return self.questions[self.current_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_index + 1 >= self.total


def result_message(score: int, total: int) -> str:
    """Encouragement shown on the results screen."""

    if total and score == total:
        return "Perfect! You're amazing! \U0001F31F"
    if total and score / total >= 0.7:
        return "Great job! Keep it up! \U0001F389"
    return "Good try! Practice makes perfect! \U0001F4AA"


class SessionController:
    """Drive quiz sessions over questions read from a ``RecordStore``."""

    def __init__(
        self,
        store: RecordStore,
        *,
        question_limit: int = DEFAULT_QUESTION_LIMIT,
        transcriber: Optional[TranscriptionClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if question_limit <= 0:
            raise ValueError("question_limit must be positive")
        self.store = store
        self.question_limit = question_limit
        self.transcriber = transcriber
        self.logger = logger or logging.getLogger(__name__)

    def start_session(self, topic_id: str) -> QuizSession:
        topic = self.store.select_topic(topic_id)
        if topic is None:
            raise NotFoundError(f"Topic not found: {topic_id}")
        session = QuizSession(topic=topic)
        questions: Sequence[Question] = self.store.select_questions(
            topic_id, limit=self.question_limit
        )
        if not questions:
            raise NoQuestionsError(
                f"Topic '{topic.name}' has no questions yet; generate some first"
            )
        session.questions = list(questions)
        session.state = SessionState.IN_PROGRESS
        self.logger.info(
            "Session started",
            extra={"topic_id": topic.id, "questions": session.total},
        )
        return session

    def submit_answer(
        self, session: QuizSession, raw_input: str
    ) -> AnswerFeedback:
        """Grade ``raw_input`` for the current question and lock it."""

        if session.state is not SessionState.IN_PROGRESS:
            raise SessionStateError(
                f"Cannot submit an answer while the session is "
                f"{session.state.value}"
            )
        if raw_input is None or not raw_input.strip():
            raise SessionStateError("Answer must not be blank")

        question = session.questions[session.current_index]
        is_correct = evaluate(question, raw_input)
        if is_correct:
            session.score += 1
        session.last_attempt = AnswerAttempt(
            question_id=question.id,
            raw_input=raw_input,
            is_correct=is_correct,
        )
        session.state = SessionState.REVEALED
        self.logger.debug(
            "Answer graded",
            extra={
                "topic_id": session.topic.id,
                "question_id": question.id,
                "is_correct": is_correct,
            },
        )
        return AnswerFeedback(
            is_correct=is_correct,
            correct_answer=question.correct_answer,
            fun_fact=question.fun_fact,
        )

    def submit_spoken_answer(
        self,
        session: QuizSession,
        audio_b64: str,
        *,
        language: Optional[str] = None,
    ) -> tuple[str, AnswerFeedback]:
        """Transcribe a recording and grade the transcript.

        ``TranscriptionEmptyError`` propagates with the question still open
        so the learner can try again. Returns ``(transcript, feedback)``.
        """

        if session.state is not SessionState.IN_PROGRESS:
            raise SessionStateError(
                f"Cannot submit an answer while the session is "
                f"{session.state.value}"
            )
        if self.transcriber is None:
            raise SessionStateError("Spoken answers are not enabled")
        transcript = self.transcriber.transcribe(audio_b64, language=language)
        return transcript, self.submit_answer(session, transcript)

    def advance(self, session: QuizSession) -> Question | SessionSummary:
        """Move past a revealed question.

        Returns the next question, or the summary once the last question
        has been revealed.
        """

        if session.state is not SessionState.REVEALED:
            raise SessionStateError(
                "Answer the current question before moving on"
            )
        session.last_attempt = None
        if session.is_last_question:
            session.state = SessionState.COMPLETED
            summary = self.summary(session)
            self.logger.info(
                "Session completed",
                extra={
                    "topic_id": session.topic.id,
                    "score": summary.score,
                    "total": summary.total,
                },
            )
            return summary
        session.current_index += 1
        session.state = SessionState.IN_PROGRESS
        return session.questions[session.current_index]

    def summary(self, session: QuizSession) -> SessionSummary:
        if session.state is not SessionState.COMPLETED:
            raise SessionStateError("Session has not finished yet")
        return SessionSummary(
            topic_name=session.topic.name,
            score=session.score,
            total=session.total,
            message=result_message(session.score, session.total),
        )
