"""Unit tests for GoogleSpeechBackend."""

import base64
import pytest
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

from google.api_core import exceptions as gax_exceptions
from google.cloud import speech

from koememo.exceptions import MissingCredentialError, NoSpeechDetectedError, TranscriptionError
from koememo.transcription.google_backend import (
    GoogleSpeechBackend,
    encoding_for_mime_type,
    sample_rate_for_mime_type,
)

PAYLOAD = base64.b64encode(b"RIFF fake wav").decode()


def recognize_response(*transcripts):
    return speech.RecognizeResponse(results=[
        speech.SpeechRecognitionResult(
            alternatives=[speech.SpeechRecognitionAlternative(transcript=t, confidence=0.9)])
        for t in transcripts
    ])


def make_backend(response=None, error=None):
    client = Mock()
    client.recognize = AsyncMock(return_value=response, side_effect=error)
    return GoogleSpeechBackend(api_key="test-key", client=client), client


@pytest.mark.unit
class TestEncodingSelection:

    @pytest.mark.parametrize("mime_type,encoding,rate", [
        ("audio/webm", "WEBM_OPUS", 48000),
        ("audio/webm;codecs=opus", "WEBM_OPUS", 48000),
        ("audio/wav", "LINEAR16", 16000),
        ("audio/x-wav", "LINEAR16", 16000),
        ("audio/mp3", "MP3", 16000),
        ("audio/mpeg", "MP3", 16000),
        ("audio/flac", "FLAC", 16000),
        ("audio/ogg", "OGG_OPUS", 16000),
        ("audio/mp4", "OGG_OPUS", 16000),
    ])
    def test_mapping(self, mime_type, encoding, rate):
        assert encoding_for_mime_type(mime_type) == encoding
        assert sample_rate_for_mime_type(mime_type) == rate

    def test_mapping_is_deterministic(self):
        assert [encoding_for_mime_type("audio/webm") for _ in range(3)] == ["WEBM_OPUS"] * 3

    def test_build_config(self):
        backend, _ = make_backend()
        config = backend.build_config("audio/webm")

        assert config.encoding == speech.RecognitionConfig.AudioEncoding.WEBM_OPUS
        assert config.sample_rate_hertz == 48000
        assert config.language_code == "ja-JP"
        assert config.enable_automatic_punctuation is True


@pytest.mark.unit
class TestGoogleSpeechBackend:

    def test_missing_credentials_fail_before_client(self):
        with patch('koememo.transcription.google_backend.speech.SpeechAsyncClient') as client_class:
            with pytest.raises(MissingCredentialError):
                GoogleSpeechBackend(api_key=None, credentials_path=None)
            client_class.assert_not_called()

    def test_initialize_with_api_key(self):
        with patch('koememo.transcription.google_backend.speech.SpeechAsyncClient') as client_class:
            backend = GoogleSpeechBackend(api_key="test-key")
            assert backend.initialize() is True

            client_class.assert_called_once()
            assert client_class.call_args.kwargs['client_options'].api_key == "test-key"

    def test_initialize_with_incomplete_service_account(self, temp_data_dir):
        creds = Path(temp_data_dir) / "creds.json"
        creds.write_text("{}", encoding='utf-8')
        backend = GoogleSpeechBackend(credentials_path=str(creds))

        with pytest.raises(TranscriptionError) as exc_info:
            backend.initialize()
        assert "Could not set up" in str(exc_info.value)
        assert backend.client is None

    def test_initialize_with_missing_service_account(self, temp_data_dir):
        backend = GoogleSpeechBackend(credentials_path=str(Path(temp_data_dir) / "missing.json"))

        with pytest.raises(TranscriptionError):
            backend.initialize()

    @pytest.mark.asyncio
    async def test_transcribe_joins_results(self):
        backend, client = make_backend(recognize_response("今日は会議です。", "よろしくお願いします。"))

        text = await backend.transcribe(PAYLOAD, "audio/wav")

        assert text == "今日は会議です。 よろしくお願いします。"
        kwargs = client.recognize.call_args.kwargs
        assert kwargs['audio'].content == b"RIFF fake wav"
        assert kwargs['config'].encoding == speech.RecognitionConfig.AudioEncoding.LINEAR16

    @pytest.mark.asyncio
    async def test_zero_results(self):
        backend, _ = make_backend(speech.RecognizeResponse())

        with pytest.raises(NoSpeechDetectedError) as exc_info:
            await backend.transcribe(PAYLOAD, "audio/wav")
        assert "no speech" in str(exc_info.value).lower()

    @pytest.mark.asyncio
    async def test_whitespace_results(self):
        backend, _ = make_backend(recognize_response("  ", ""))

        with pytest.raises(NoSpeechDetectedError):
            await backend.transcribe(PAYLOAD, "audio/wav")

    @pytest.mark.asyncio
    async def test_api_failure_is_not_no_speech(self):
        backend, _ = make_backend(error=gax_exceptions.ServiceUnavailable("backend down"))

        with pytest.raises(TranscriptionError) as exc_info:
            await backend.transcribe(PAYLOAD, "audio/wav")
        assert not isinstance(exc_info.value, NoSpeechDetectedError)
        assert "unavailable" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self):
        backend, _ = make_backend(error=gax_exceptions.InvalidArgument("bad encoding"))

        with pytest.raises(TranscriptionError):
            await backend.transcribe(PAYLOAD, "audio/wav")

    @pytest.mark.asyncio
    async def test_empty_payload(self):
        backend, client = make_backend(recognize_response("x"))

        with pytest.raises(TranscriptionError):
            await backend.transcribe("", "audio/wav")
        client.recognize.assert_not_called()
