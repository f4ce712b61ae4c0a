from __future__ import annotations

import pytest

from kidquiz.core import ai
from kidquiz.core.ai import load_client

from fixtures import FakeOpenAIFactory


@pytest.fixture
def factory(monkeypatch: pytest.MonkeyPatch) -> FakeOpenAIFactory:
    fake = FakeOpenAIFactory()
    monkeypatch.setattr(ai, "OpenAI", fake)
    # Keep a developer's local .env out of the tests.
    monkeypatch.setattr(ai, "load_dotenv", lambda *a, **k: False)
    return fake


def test_load_client_requires_api_key(
    monkeypatch: pytest.MonkeyPatch, factory: FakeOpenAIFactory
) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(RuntimeError) as exc:
        load_client()
    assert "OPENAI_API_KEY" in str(exc.value)
    assert factory.last is None


def test_load_client_passes_key(
    monkeypatch: pytest.MonkeyPatch, factory: FakeOpenAIFactory
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    client = load_client()
    assert client is factory.last
    assert client.init_kwargs == {"api_key": "test-key"}


def test_load_client_forwards_base_url_and_timeout(
    monkeypatch: pytest.MonkeyPatch, factory: FakeOpenAIFactory
) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    load_client(api_base="http://localhost:9000/v1", timeout_seconds=15)
    assert factory.last.init_kwargs == {
        "api_key": "test-key",
        "base_url": "http://localhost:9000/v1",
        "timeout": 15,
    }
