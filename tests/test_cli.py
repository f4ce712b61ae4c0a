from __future__ import annotations

from pathlib import Path

import pytest

from kidquiz import cli
from kidquiz.store import JsonlRecordStore

from fixtures import FakeChatClient, as_reply, general_items


def run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    return int(exc.value.code)


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "kidquiz.toml"
    path.write_text(
        f"""
[storage]
data_dir = "{tmp_path / 'data'}"

[logging]
log_dir = "{tmp_path / 'logs'}"
""",
        encoding="utf-8",
    )
    monkeypatch.setenv("KIDQUIZ_CONFIG", str(path))
    return path


@pytest.fixture
def offline(monkeypatch: pytest.MonkeyPatch) -> None:
    def _no_client(**_kwargs):
        raise RuntimeError("OPENAI_API_KEY not found in environment")

    monkeypatch.setattr(cli, "load_client", _no_client)


def _data(tmp_path: Path) -> JsonlRecordStore:
    return JsonlRecordStore(tmp_path / "data")


def test_init_writes_template(tmp_path, capsys):
    target = tmp_path / "kidquiz.toml"
    assert run(["init", "--path", str(target)]) == 0
    assert target.exists()
    assert "Created template" in capsys.readouterr().out

    assert run(["init", "--path", str(target)]) == 2
    assert "already exists" in capsys.readouterr().err
    assert run(["init", "--path", str(target), "--force"]) == 0


def test_topics_add_infers_policy(tmp_path, config_path, capsys):
    assert run(["topics", "add", "Telugu Words", "--emoji", "x"]) == 0
    assert run(["topics", "add", "Oceans"]) == 0

    topics = _data(tmp_path).list_topics()
    assert [(t.name, t.policy) for t in topics] == [
        ("Telugu Words", "vocabulary"),
        ("Oceans", "general"),
    ]
    assert "[vocabulary]" in capsys.readouterr().out


def test_topics_add_rejects_unknown_policy(config_path, capsys):
    assert run(["topics", "add", "Oceans", "--policy", "nope"]) == 2
    assert "Unknown policy" in capsys.readouterr().err


def test_topics_list(config_path, capsys):
    assert run(["topics", "list"]) == 0
    assert "No topics yet" in capsys.readouterr().out

    run(["topics", "add", "Oceans", "--emoji", "O"])
    capsys.readouterr()
    assert run(["topics", "list"]) == 0
    assert "O Oceans [general]" in capsys.readouterr().out


def test_questions_generate_offline_uses_fallback(
    tmp_path, config_path, offline, capsys
):
    topic = _data(tmp_path).insert_topic("Weather", "W", "general")

    assert run(["questions", "generate", topic.id]) == 0

    out = capsys.readouterr().out
    assert "Generated 10 question(s) for 'Weather'" in out
    assert "offline question bank" in out
    assert len(_data(tmp_path).select_questions(topic.id)) == 10
    assert (tmp_path / "logs" / "kidquiz.log").exists()


def test_questions_generate_with_client(
    tmp_path, config_path, monkeypatch, capsys
):
    client = FakeChatClient(as_reply(general_items(10)))
    monkeypatch.setattr(cli, "load_client", lambda **_kwargs: client)
    topic = _data(tmp_path).insert_topic("Colors", "C", "general")

    assert run(["questions", "generate", topic.id]) == 0

    out = capsys.readouterr().out
    assert "Generated 10 question(s) for 'Colors'" in out
    assert "offline" not in out
    assert client.calls[0]["model"] == "gpt-4o-mini"


def test_questions_generate_unknown_topic(config_path, offline, capsys):
    assert run(["questions", "generate", "missing"]) == 2
    assert "Topic not found" in capsys.readouterr().err


def test_questions_generate_unreadable_store_exits_one(
    tmp_path, config_path, offline, capsys
):
    store = _data(tmp_path)
    topic = store.insert_topic("Weather", "W", "general")
    store.questions_path.write_bytes(b"[1, 2]\n")

    assert run(["questions", "generate", topic.id]) == 1
    assert "Failed to save questions" in capsys.readouterr().err


def test_topics_list_unreadable_store_exits_one(tmp_path, config_path, capsys):
    store = _data(tmp_path)
    store.root.mkdir(parents=True, exist_ok=True)
    store.topics_path.write_bytes(b'{"name": "\xff"}\n')

    assert run(["topics", "list"]) == 1
    assert "Failed to read" in capsys.readouterr().err


def test_questions_list(tmp_path, config_path, offline, capsys):
    topic = _data(tmp_path).insert_topic("Telugu", "T", "vocabulary")
    assert run(["questions", "list", topic.id]) == 1
    assert "No questions" in capsys.readouterr().out

    run(["questions", "generate", topic.id])
    capsys.readouterr()
    assert run(["questions", "list", topic.id]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 5
    assert all(line.startswith("[voice_input]") for line in lines)

    assert run(["questions", "list", "missing"]) == 2


def test_start_without_questions(tmp_path, config_path, offline, capsys):
    topic = _data(tmp_path).insert_topic("Oceans", "O", "general")
    assert run(["start", topic.id]) == 1
    assert "no questions yet" in capsys.readouterr().err


def test_start_unknown_topic(config_path, offline):
    assert run(["start", "missing"]) == 2


def test_start_rejects_non_positive_num(config_path):
    assert run(["start", "abc", "--num", "0"]) == 2


def test_start_plays_session(tmp_path, config_path, offline, monkeypatch, capsys):
    topic = _data(tmp_path).insert_topic("Math", "M", "general")
    run(["questions", "generate", topic.id])
    questions = _data(tmp_path).select_questions(topic.id, limit=2)
    answers = iter(q.correct_answer for q in questions)
    monkeypatch.setattr("builtins.input", lambda *args: next(answers))
    capsys.readouterr()

    assert run(["start", topic.id, "--num", "2"]) == 0

    out = capsys.readouterr().out
    assert "Quiz Complete!" in out
    assert "2 / 2" in out


def test_invalid_config_exits_with_usage_code(tmp_path, monkeypatch, capsys):
    path = tmp_path / "bad.toml"
    path.write_text("[session]\nquestion_limit = -1\n", encoding="utf-8")
    assert run(["--config", str(path), "topics", "list"]) == 2
    assert "session.question_limit" in capsys.readouterr().err
