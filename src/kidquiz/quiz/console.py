"""Rich-powered terminal front-end for a quiz session.

The loop renders one question at a time, reads a line from
``input_provider`` and routes it through ``SessionController``. Choice
questions take an option letter or the exact option label; typed answers
are passed through; spoken answers take ``@path/to/recording`` which is
transcribed before grading. ``q`` ends the session early.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..errors import (
    SessionStateError,
    TranscriptionEmptyError,
    TranscriptionServiceError,
)
from ..models import Question, QuestionType
from ..transcription import encode_audio_file
from .session import (
    AnswerFeedback,
    QuizSession,
    SessionController,
    SessionState,
    SessionSummary,
)

__all__ = ["InputProvider", "option_key", "resolve_choice", "run_quiz_session"]

InputProvider = Callable[[], str]

_QUIT_COMMANDS = {"q", "quit", "exit"}


def option_key(index: int) -> str:
    return chr(ord("A") + index)


def resolve_choice(question: Question, text: str) -> str | None:
    """Map a letter key or an exact option label to the option text."""

    options = question.options or ()
    if len(text) == 1 and text.isalpha():
        idx = ord(text.upper()) - ord("A")
        if 0 <= idx < len(options):
            return options[idx]
    if text in options:
        return text
    return None


def run_quiz_session(
    controller: SessionController,
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
) -> SessionSummary | None:
    """Play ``session`` to the end; return ``None`` if the learner quits."""

    while session.state is SessionState.IN_PROGRESS:
        question = session.questions[session.current_index]
        _render_question(console, session, question)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Quiz interrupted.[/]")
            return None

        text = (raw or "").strip()
        if text.lower() in _QUIT_COMMANDS:
            console.print("[bold yellow]See you next time![/]")
            return None
        if not text:
            console.print("[red]Please enter an answer.[/red]")
            continue

        feedback = _submit(controller, session, question, text, console)
        if feedback is None:
            continue
        _render_feedback(console, feedback)

        outcome = controller.advance(session)
        if isinstance(outcome, SessionSummary):
            _render_summary(console, outcome)
            return outcome
    return None


def _submit(
    controller: SessionController,
    session: QuizSession,
    question: Question,
    text: str,
    console: Console,
) -> AnswerFeedback | None:
    if question.type is QuestionType.VOICE_INPUT and text.startswith("@"):
        return _submit_recording(controller, session, text[1:], console)

    answer = text
    if question.options is not None:
        choice = resolve_choice(question, text)
        if choice is None:
            console.print(
                f"[red]'{text}' is not one of the choices for this "
                "question.[/red]"
            )
            return None
        answer = choice
    try:
        return controller.submit_answer(session, answer)
    except SessionStateError as exc:
        console.print(f"[red]{exc}[/red]")
        return None


def _submit_recording(
    controller: SessionController,
    session: QuizSession,
    path_text: str,
    console: Console,
) -> AnswerFeedback | None:
    path = Path(path_text).expanduser()
    try:
        audio_b64 = encode_audio_file(path)
    except OSError as exc:
        console.print(f"[red]Could not read recording {path}: {exc}[/red]")
        return None
    try:
        transcript, feedback = controller.submit_spoken_answer(
            session, audio_b64
        )
    except TranscriptionEmptyError:
        console.print(
            "[yellow]I didn't hear anything. Please try again![/yellow]"
        )
        return None
    except (TranscriptionServiceError, SessionStateError) as exc:
        console.print(f"[red]{exc}[/red] You can type the answer instead.")
        return None
    console.print(Text(f"I heard: {transcript}", style="dim"))
    return feedback


def _render_question(
    console: Console, session: QuizSession, question: Question
) -> None:
    header = Text.assemble(
        (f"{session.topic.emoji} {session.topic.name}  ", "bold magenta"),
        (f"Question {session.current_index + 1}", "bold cyan"),
        (f" / {session.total}", "dim"),
        (f"   Score: {session.score}", "green"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.text, style="bold"))

    if question.options is not None:
        table = Table(show_header=False, box=box.SIMPLE, expand=True)
        table.add_column("Key", justify="center", style="cyan")
        table.add_column("Choice")
        for idx, option in enumerate(question.options):
            table.add_row(option_key(idx), option)
        console.print(table)
        hint = "Type a letter or the answer, q to quit"
    elif question.type is QuestionType.VOICE_INPUT:
        hint = "Type the word, or @path/to/recording to speak it, q to quit"
    else:
        hint = "Type your answer, q to quit"
    console.print(Text(hint, style="dim"))


def _render_feedback(console: Console, feedback: AnswerFeedback) -> None:
    if feedback.is_correct:
        title, border = "Correct! \U0001F389", "green"
        body = Text()
    else:
        title, border = "Not quite!", "red"
        body = Text.assemble(
            ("The correct answer is: ", "bold"),
            (feedback.correct_answer, "bold green"),
            "\n",
        )
    if feedback.fun_fact:
        body.append(f"\U0001F4A1 Fun fact: {feedback.fun_fact}")
    console.print(Panel(body, title=title, border_style=border))


def _render_summary(console: Console, summary: SessionSummary) -> None:
    console.print()
    console.rule(Text("Quiz Complete!", style="bold magenta"))
    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Topic", summary.topic_name)
    overview.add_row("Score", f"{summary.score} / {summary.total}")
    overview.add_row("Percentage", f"{summary.percentage}%")
    console.print(overview)
    console.print(Panel(summary.message, border_style="magenta"))
