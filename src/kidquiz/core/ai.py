"""Shared OpenAI client setup."""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv
from openai import OpenAI

__all__ = ["load_client"]


def load_client(
    *,
    api_base: str | None = None,
    timeout_seconds: float | None = None,
) -> Any:
    """Initialize an OpenAI client using environment-derived credentials.

    ``OPENAI_API_KEY`` is read from the process environment after loading a
    local ``.env`` file. A missing key raises ``RuntimeError`` so callers can
    decide whether to degrade (content generation falls back to the static
    question bank) or abort.
    """
    load_dotenv()
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError(
            "OPENAI_API_KEY not found in environment. Set it or add to .env"
        )
    kwargs: dict[str, Any] = {"api_key": api_key}
    if api_base:
        kwargs["base_url"] = api_base
    if timeout_seconds is not None:
        kwargs["timeout"] = timeout_seconds
    return OpenAI(**kwargs)
