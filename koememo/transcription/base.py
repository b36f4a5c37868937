"""Abstract base class for transcription backends."""

from abc import ABC, abstractmethod
import logging

from ..exceptions import TranscriptionError

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Turns base64-encoded audio into plain text."""

    provider: str = "unknown"

    def __init__(self, language: str = "ja-JP"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    async def transcribe(self, payload: str, mime_type: str) -> str:
        """Transcribe base64-encoded audio.

        Args:
            payload: Base64 audio data without a data-URL prefix
            mime_type: Container MIME type of the audio

        Returns:
            Transcript text, never empty

        Raises:
            TranscriptionError: the provider failed or recognised nothing
        """
        pass

    def initialize(self) -> bool:
        """Prepare backend resources. Returns True when ready."""
        return True

    async def cleanup(self) -> None:
        """Clean up backend resources."""
        pass

    def _require_payload(self, payload: str, mime_type: str) -> None:
        if not payload:
            raise TranscriptionError("No audio data to transcribe")
        if not mime_type:
            raise TranscriptionError("Audio MIME type is required")
