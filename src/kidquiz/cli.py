"""Command-line entry point for kidquiz.

Subcommands manage topics, regenerate a topic's question batch and run an
interactive quiz in the terminal. Exit codes: 0 on success, 1 when the
operation could not produce or store content, 2 for usage, configuration
or unknown-id errors.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.console import Console

from .content import (
    ContentOrchestrator,
    GenerationClient,
    SafetyFilter,
    infer_policy_name,
    policies_from_config,
)
from .core import ConfigError, KidQuizConfig, configure_logger, load_client
from .core.config import DEFAULT_CONFIG_NAME, load_config, write_template
from .errors import (
    NoQuestionsError,
    NotFoundError,
    PersistenceFailedError,
    StoreError,
)
from .quiz import SessionController, run_quiz_session
from .store import JsonlRecordStore
from .transcription import TranscriptionClient

LOGGER_NAME = "kidquiz"


def _print_error(message: str) -> None:
    sys.stderr.write(f"Error: {message}\n")


def _to_path(value: str | None) -> Path | None:
    if value is None:
        return None
    return Path(value).expanduser().resolve()


def _load(args: argparse.Namespace) -> tuple[KidQuizConfig, logging.Logger]:
    cfg = load_config(explicit_path=_to_path(getattr(args, "config", None)))
    logger, _ = configure_logger(
        LOGGER_NAME,
        log_dir=cfg.log_dir,
        level=cfg.logging.level,
        verbose=bool(getattr(args, "verbose", False)) or cfg.logging.verbose,
    )
    return cfg, logger


def _store(cfg: KidQuizConfig) -> JsonlRecordStore:
    return JsonlRecordStore(cfg.storage.data_dir)


def _openai_client(cfg: KidQuizConfig, logger: logging.Logger) -> Optional[Any]:
    try:
        return load_client(
            api_base=cfg.generation.api_base,
            timeout_seconds=cfg.generation.request_timeout_seconds,
        )
    except RuntimeError as exc:
        logger.warning(
            "AI client unavailable; using offline behaviour",
            extra={"detail": str(exc)},
        )
        return None


def _cmd_init(args: argparse.Namespace) -> int:
    target = _to_path(args.path) or Path(DEFAULT_CONFIG_NAME).resolve()
    try:
        write_template(target, overwrite=args.force)
    except ConfigError as exc:
        _print_error(str(exc))
        return 2
    print(f"Created template {target}")
    return 0


def _cmd_topics_add(args: argparse.Namespace) -> int:
    cfg, logger = _load(args)
    policies = policies_from_config(cfg.policies)
    policy = args.policy
    if policy is None:
        policy = infer_policy_name(args.name, policies)
    elif policy not in policies:
        _print_error(
            f"Unknown policy '{policy}'. Choose from: "
            f"{', '.join(sorted(policies))}"
        )
        return 2
    try:
        topic = _store(cfg).insert_topic(args.name, args.emoji, policy)
    except StoreError as exc:
        _print_error(str(exc))
        return 1
    logger.info(
        "Topic created",
        extra={"topic_id": topic.id, "name": topic.name, "policy": policy},
    )
    print(f"Created topic {topic.emoji} {topic.name} [{policy}] id={topic.id}")
    return 0


def _cmd_topics_list(args: argparse.Namespace) -> int:
    cfg, _ = _load(args)
    try:
        topics = _store(cfg).list_topics()
    except StoreError as exc:
        _print_error(str(exc))
        return 1
    if not topics:
        print("No topics yet. Add one with 'kidquiz topics add'.")
        return 0
    for topic in topics:
        print(f"{topic.id}  {topic.emoji} {topic.name} [{topic.policy or '-'}]")
    return 0


def _cmd_questions_generate(args: argparse.Namespace) -> int:
    cfg, logger = _load(args)
    generator = GenerationClient(
        _openai_client(cfg, logger),
        model=cfg.generation.model,
        temperature=cfg.generation.temperature,
        max_tokens=cfg.generation.max_tokens,
    )
    orchestrator = ContentOrchestrator(
        _store(cfg),
        generator,
        policies=policies_from_config(cfg.policies),
        safety=SafetyFilter(cfg.safety.extra_terms),
        logger=logger,
    )
    try:
        result = orchestrator.regenerate_topic(args.topic_id)
    except NotFoundError as exc:
        _print_error(str(exc))
        return 2
    except (PersistenceFailedError, StoreError) as exc:
        _print_error(str(exc))
        return 1
    note = " (offline question bank)" if result.source == "fallback" else ""
    print(
        f"Generated {result.questions_generated} question(s) for "
        f"'{result.topic_name}'{note}"
    )
    return 0


def _cmd_questions_list(args: argparse.Namespace) -> int:
    cfg, _ = _load(args)
    store = _store(cfg)
    try:
        topic = store.select_topic(args.topic_id)
        if topic is None:
            _print_error(f"Topic not found: {args.topic_id}")
            return 2
        questions = store.select_questions(topic.id)
    except StoreError as exc:
        _print_error(str(exc))
        return 1
    if not questions:
        print(
            f"No questions for '{topic.name}'. Run 'kidquiz questions "
            f"generate {topic.id}'."
        )
        return 1
    for question in questions:
        print(f"[{question.type.value}] {question.text[:100]}")
    return 0


def _cmd_start(args: argparse.Namespace) -> int:
    cfg, logger = _load(args)
    client = _openai_client(cfg, logger)
    transcriber = TranscriptionClient(
        client,
        model=cfg.transcription.model,
        language=cfg.transcription.language,
    )
    controller = SessionController(
        _store(cfg),
        question_limit=args.num or cfg.session.question_limit,
        transcriber=transcriber,
        logger=logger,
    )
    try:
        session = controller.start_session(args.topic_id)
    except NotFoundError as exc:
        _print_error(str(exc))
        return 2
    except (NoQuestionsError, StoreError) as exc:
        _print_error(str(exc))
        return 1

    console = Console()
    summary = run_quiz_session(
        controller,
        session,
        console,
        lambda: console.input("[bold cyan]> [/]"),
    )
    return 0 if summary is not None else 1


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="kidquiz",
        description="Generate and play quizzes for young learners",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument(
        "--config",
        help=f"Path to {DEFAULT_CONFIG_NAME} (defaults to $KIDQUIZ_CONFIG "
        "or ./kidquiz.toml)",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr as well as the log file",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser("init", help="Write a kidquiz.toml template")
    sp_init.add_argument("--path", help="Destination for the template")
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )

    sp_topics = sub.add_parser("topics", help="Topic-related commands")
    topics_sub = sp_topics.add_subparsers(dest="action", required=True)
    sp_t_add = topics_sub.add_parser("add", help="Create a topic")
    sp_t_add.add_argument("name")
    sp_t_add.add_argument("--emoji", default="\U0001F4DA")
    sp_t_add.add_argument(
        "--policy",
        help="Generation policy name (inferred from the topic name if omitted)",
    )
    topics_sub.add_parser("list", help="List topics")

    sp_q = sub.add_parser("questions", help="Question-related commands")
    q_sub = sp_q.add_subparsers(dest="action", required=True)
    sp_q_gen = q_sub.add_parser(
        "generate", help="Replace a topic's questions with a fresh batch"
    )
    sp_q_gen.add_argument("topic_id")
    sp_q_list = q_sub.add_parser("list", help="List a topic's questions")
    sp_q_list.add_argument("topic_id")

    sp_start = sub.add_parser("start", help="Start a quiz session")
    sp_start.add_argument("topic_id")
    sp_start.add_argument(
        "--num",
        type=int,
        help="Maximum number of questions (defaults to session.question_limit)",
    )
    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if getattr(args, "num", None) is not None and args.num <= 0:
        parser.error("--num must be positive")
    handlers = {
        ("init", None): _cmd_init,
        ("topics", "add"): _cmd_topics_add,
        ("topics", "list"): _cmd_topics_list,
        ("questions", "generate"): _cmd_questions_generate,
        ("questions", "list"): _cmd_questions_list,
        ("start", None): _cmd_start,
    }
    handler = handlers.get((args.command, getattr(args, "action", None)))
    if handler is None:  # pragma: no cover - argparse enforces choices
        parser.print_help()
        raise SystemExit(2)
    try:
        code = handler(args)
    except ConfigError as exc:
        _print_error(str(exc))
        code = 2
    raise SystemExit(code)


if __name__ == "__main__":  # pragma: no cover
    main()
