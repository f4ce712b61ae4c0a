"""Speech-to-text for spoken answers using Whisper.

The quiz front-end records a short clip, base64-encodes it and hands it to
``TranscriptionClient.transcribe`` together with a language hint. An empty
transcript is a normal outcome (the child said nothing, or too quietly) and
is reported as ``TranscriptionEmptyError`` so the caller can ask again.
"""

from __future__ import annotations

import base64
import binascii
from pathlib import Path
from typing import Any, Optional

from .errors import TranscriptionEmptyError, TranscriptionServiceError

__all__ = ["TranscriptionClient", "encode_audio_file"]


def encode_audio_file(path: Path) -> str:
    """Read an audio file and return its base64 text."""

    return base64.b64encode(Path(path).read_bytes()).decode("ascii")


class TranscriptionClient:
    def __init__(
        self,
        client: Optional[Any],
        *,
        model: str = "whisper-1",
        language: str = "te",
    ) -> None:
        self.client = client
        self.model = model
        self.language = language

    def transcribe(
        self,
        audio_b64: str,
        *,
        language: Optional[str] = None,
        filename: str = "answer.webm",
    ) -> str:
        """Return the transcript of ``audio_b64``, stripped of whitespace."""

        if self.client is None:
            raise TranscriptionServiceError(
                "Speech service credentials are not configured"
            )
        try:
            audio = base64.b64decode(audio_b64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise TranscriptionServiceError(
                "Audio payload is not valid base64"
            ) from exc
        if not audio:
            raise TranscriptionEmptyError("No audio was recorded")

        try:
            response = self.client.audio.transcriptions.create(
                model=self.model,
                file=(filename, audio),
                language=language or self.language,
            )
        except Exception as exc:
            raise TranscriptionServiceError(
                f"Transcription request failed: {exc}"
            ) from exc

        text = response if isinstance(response, str) else getattr(
            response, "text", None
        )
        if not isinstance(text, str) or not text.strip():
            raise TranscriptionEmptyError("No speech detected")
        return text.strip()
