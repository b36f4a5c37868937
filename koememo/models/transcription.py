"""Transcription and post-processing data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class TextSlot(Enum):
    """The three independent text variants a memo carries."""
    RAW = "raw"
    FILLER_REMOVED = "filler_removed"
    CORRECTED = "corrected"


@dataclass(frozen=True)
class TranscriptionRequest:
    """One call to a transcription backend."""
    payload: str  # base64 audio
    mime_type: str
    provider: str


@dataclass
class PostProcessingResult:
    """Outcome of running both text transforms over a raw transcript."""
    raw_text: str
    filler_removed: Optional[str] = None
    corrected: Optional[str] = None
    errors: Dict[TextSlot, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.errors

    @property
    def is_partial(self) -> bool:
        return bool(self.errors) and (self.filler_removed is not None or self.corrected is not None)
