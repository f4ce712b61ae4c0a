"""Shared testing fixtures and fakes for the kidquiz test suite."""

from .batches import as_reply, general_items, voice_items  # noqa: F401
from .clients import (  # noqa: F401
    FakeAudioClient,
    FakeChatClient,
    FakeOpenAIFactory,
)

__all__ = [
    "FakeAudioClient",
    "FakeChatClient",
    "FakeOpenAIFactory",
    "as_reply",
    "general_items",
    "voice_items",
]
