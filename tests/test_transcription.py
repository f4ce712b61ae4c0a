from __future__ import annotations

import base64

import pytest

from kidquiz.errors import TranscriptionEmptyError, TranscriptionServiceError
from kidquiz.transcription import TranscriptionClient, encode_audio_file

from fixtures import FakeAudioClient


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_transcribe_sends_audio_and_language_hint():
    client = FakeAudioClient("  hello  ")
    transcriber = TranscriptionClient(client, model="whisper-1")

    text = transcriber.transcribe(_b64(b"abc"), language="en", filename="x.wav")

    assert text == "hello"
    assert client.calls == [
        {"model": "whisper-1", "file": ("x.wav", b"abc"), "language": "en"}
    ]


def test_transcribe_defaults_to_configured_language():
    client = FakeAudioClient("నీరు")
    TranscriptionClient(client, language="te").transcribe(_b64(b"abc"))
    assert client.calls[0]["language"] == "te"


@pytest.mark.parametrize("reply", ["", "   ", None])
def test_empty_transcript_is_retriable(reply):
    transcriber = TranscriptionClient(FakeAudioClient(reply))
    with pytest.raises(TranscriptionEmptyError):
        transcriber.transcribe(_b64(b"abc"))


def test_empty_audio_is_retriable():
    client = FakeAudioClient("hi")
    with pytest.raises(TranscriptionEmptyError):
        TranscriptionClient(client).transcribe("")
    assert client.calls == []


def test_invalid_base64_is_service_error():
    with pytest.raises(TranscriptionServiceError):
        TranscriptionClient(FakeAudioClient("hi")).transcribe("***")


def test_service_failure_is_wrapped():
    client = FakeAudioClient(error=TimeoutError("slow"))
    with pytest.raises(TranscriptionServiceError) as exc:
        TranscriptionClient(client).transcribe(_b64(b"abc"))
    assert isinstance(exc.value.__cause__, TimeoutError)


def test_missing_client_is_service_error():
    with pytest.raises(TranscriptionServiceError):
        TranscriptionClient(None).transcribe(_b64(b"abc"))


def test_encode_audio_file(tmp_path):
    path = tmp_path / "clip.webm"
    path.write_bytes(b"\x00\x01voice")
    assert base64.b64decode(encode_audio_file(path)) == b"\x00\x01voice"
