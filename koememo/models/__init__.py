"""Data models for the koememo application."""

from .audio import AudioStats, AudioArtifact, RecordingSession
from .session import ProcessingState, MemoTexts
from .transcription import TextSlot, TranscriptionRequest, PostProcessingResult

__all__ = [
    "AudioStats",
    "AudioArtifact",
    "RecordingSession",
    "ProcessingState",
    "MemoTexts",
    "TextSlot",
    "TranscriptionRequest",
    "PostProcessingResult",
]
