"""Google Speech-to-Text transcription backend."""

import time
import logging
from typing import Optional, Any

from .base import AbstractTranscriptionBackend
from ..audio.codec import decode
from ..exceptions import MissingCredentialError, NoSpeechDetectedError, TranscriptionError

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.api_core.client_options import ClientOptions
from google.auth import exceptions as auth_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

WEBM_SAMPLE_RATE = 48000
DEFAULT_SAMPLE_RATE = 16000


def encoding_for_mime_type(mime_type: str) -> str:
    """Map a container MIME type to a RecognitionConfig.AudioEncoding name."""
    mime = mime_type.lower()
    if "webm" in mime:
        return "WEBM_OPUS"
    if "mp3" in mime or "mpeg" in mime:
        return "MP3"
    if "wav" in mime:
        return "LINEAR16"
    if "flac" in mime:
        return "FLAC"
    logger.debug(f"No explicit encoding for {mime_type}, using OGG_OPUS")
    return "OGG_OPUS"


def sample_rate_for_mime_type(mime_type: str) -> int:
    """Browsers record WebM/Opus at 48 kHz; everything else is assumed 16 kHz."""
    return WEBM_SAMPLE_RATE if "webm" in mime_type.lower() else DEFAULT_SAMPLE_RATE


class GoogleSpeechBackend(AbstractTranscriptionBackend):
    """Google Speech-to-Text API backend for transcription."""

    provider = "google-speech"

    def __init__(self,
                 api_key: Optional[str] = None,
                 credentials_path: Optional[str] = None,
                 language: str = "ja-JP",
                 enable_automatic_punctuation: bool = True,
                 timeout: float = 60.0,
                 client: Optional[Any] = None):
        """Initialize Google Speech backend.

        Args:
            api_key: Google Cloud API key with Speech-to-Text enabled
            credentials_path: Path to a service account JSON file, used when no API key is given
            language: Language code (e.g. 'ja-JP')
            enable_automatic_punctuation: Enable automatic punctuation
            timeout: Per-request timeout in seconds
            client: Pre-built SpeechAsyncClient (otherwise created by initialize())
        """
        super().__init__(language)
        if not api_key and not credentials_path:
            raise MissingCredentialError(
                "Google Speech-to-Text credentials are not configured "
                "(set GOOGLE_SPEECH_API_KEY or GOOGLE_APPLICATION_CREDENTIALS)")
        self.api_key = api_key
        self.credentials_path = credentials_path
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.timeout = timeout
        self.client = client
        self.project_id: Optional[str] = None
        self.service_name = "Google Speech-to-Text"

    def initialize(self) -> bool:
        """Create the Speech client from the API key or the service account file.

        Raises:
            TranscriptionError: the credentials could not be loaded
        """
        if self.client is not None:
            return True

        try:
            if self.api_key:
                logger.info("Using Google Speech API key")
                self.client = speech.SpeechAsyncClient(client_options=ClientOptions(api_key=self.api_key))
            else:
                logger.info(f"Loading Google credentials from: {self.credentials_path}")
                credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
                self.client = speech.SpeechAsyncClient(credentials=credentials)
                self.project_id = credentials.project_id
                logger.info(f"Using Google Cloud project: {self.project_id}")
        except (auth_exceptions.GoogleAuthError, OSError, ValueError) as e:
            logger.error(f"Failed to create Google Speech client: {e}")
            raise TranscriptionError(f"Could not set up Google Speech-to-Text client: {e}") from e

        logger.info("Google Speech-to-Text backend initialized successfully")
        return True

    def build_config(self, mime_type: str) -> speech.RecognitionConfig:
        encoding = encoding_for_mime_type(mime_type)
        sample_rate = sample_rate_for_mime_type(mime_type)
        logger.debug(f"Recognition config: {mime_type} -> {encoding} @ {sample_rate}Hz")
        return speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding[encoding],
            sample_rate_hertz=sample_rate,
            language_code=self.language,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
        )

    async def transcribe(self, payload: str, mime_type: str) -> str:
        """Transcribe base64 audio using synchronous recognition."""
        self._require_payload(payload, mime_type)
        if self.client is None:
            self.initialize()

        start_time = time.time()
        audio = speech.RecognitionAudio(content=decode(payload))
        config = self.build_config(mime_type)

        try:
            response = await self.client.recognize(config=config, audio=audio, timeout=self.timeout)
        except gax_exceptions.DeadlineExceeded as e:
            logger.error("Google STT recognize deadline exceeded")
            raise TranscriptionError(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.ServiceUnavailable as e:
            logger.error("Google STT service unavailable")
            raise TranscriptionError(f"Google Speech service unavailable: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error("Google STT API call error: %s", e)
            raise TranscriptionError(f"Google Speech API error: {e}") from e
        processing_time = time.time() - start_time

        if not response.results:
            logger.debug("--- NO SPEECH DETECTED ---")
            raise NoSpeechDetectedError("Speech recognition returned no results; no speech was detected")

        transcripts = [
            result.alternatives[0].transcript
            for result in response.results
            if result.alternatives
        ]
        text = " ".join(transcripts).strip()
        if not text:
            raise NoSpeechDetectedError("Speech recognition returned only empty transcripts")

        logger.debug(f"Transcription success: {len(response.results)} results, "
                     f"processing_time: {processing_time:.3f}s")
        return text

    async def cleanup(self) -> None:
        """Close the gRPC transport if one was opened."""
        transport = getattr(self.client, "transport", None)
        if transport is not None and hasattr(transport, "close"):
            await transport.close()
