"""Gemini multimodal transcription backend."""

import time
import logging

from .base import AbstractTranscriptionBackend
from .gemini_client import GeminiClient
from ..exceptions import ContentBlockedError, NoSpeechDetectedError, ProviderAPIError, TranscriptionError

logger = logging.getLogger(__name__)

TRANSCRIPTION_INSTRUCTION = (
    "次の音声を日本語で文字起こししてください。"
    "話者名やタイムスタンプは付けず、話された内容のテキストだけを出力してください。"
)


class GeminiTranscriptionBackend(AbstractTranscriptionBackend):
    """Sends the audio inline to a Gemini model together with a transcription instruction."""

    provider = "gemini"

    def __init__(self,
                 client: GeminiClient,
                 temperature: float = 0.0,
                 instruction: str = TRANSCRIPTION_INSTRUCTION,
                 language: str = "ja-JP"):
        """Initialize Gemini backend.

        Args:
            client: Shared Gemini client
            temperature: Sampling temperature; keep low for faithful transcripts
            instruction: Text part sent after the audio
            language: Informational only, the instruction fixes the language
        """
        super().__init__(language)
        self.client = client
        self.temperature = temperature
        self.instruction = instruction

    async def transcribe(self, payload: str, mime_type: str) -> str:
        self._require_payload(payload, mime_type)
        start_time = time.time()
        logger.debug(f"Gemini transcription: {mime_type}, {len(payload)} base64 chars, model={self.client.model}")

        parts = [
            {"inline_data": {"mime_type": mime_type, "data": payload}},
            {"text": self.instruction},
        ]
        try:
            text = await self.client.generate_content(parts, temperature=self.temperature)
        except ContentBlockedError as e:
            raise TranscriptionError(f"Gemini refused to transcribe the audio (safety filter: {e.reason})") from e
        except ProviderAPIError as e:
            raise TranscriptionError(f"Gemini transcription request failed: {e}") from e

        if not text or not text.strip():
            raise NoSpeechDetectedError("Gemini returned an empty transcript; no speech was recognised")

        logger.info(f"Gemini transcription finished in {time.time() - start_time:.2f}s ({len(text)} chars)")
        return text.strip()
