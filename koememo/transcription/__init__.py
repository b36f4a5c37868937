"""Transcription module for koememo."""

from .base import AbstractTranscriptionBackend
from .gemini_client import GeminiClient
from .gemini_backend import GeminiTranscriptionBackend
from .google_backend import GoogleSpeechBackend, encoding_for_mime_type, sample_rate_for_mime_type
from .chatgpt_engine import ChatGPTEngine
from .factory import create_gemini_client, create_transcription_backend, create_correction_engine

__all__ = [
    "AbstractTranscriptionBackend",
    "GeminiClient",
    "GeminiTranscriptionBackend",
    "GoogleSpeechBackend",
    "encoding_for_mime_type",
    "sample_rate_for_mime_type",
    "ChatGPTEngine",
    "create_gemini_client",
    "create_transcription_backend",
    "create_correction_engine",
]
