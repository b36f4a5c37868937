"""Session-related data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from .transcription import TextSlot


class ProcessingState(Enum):
    """Where the current memo is in its record → transcribe → tidy cycle."""
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    POST_PROCESSING = "post_processing"
    DONE = "done"
    ERRORED = "errored"

    @property
    def is_busy(self) -> bool:
        return self in (ProcessingState.RECORDING,
                        ProcessingState.TRANSCRIBING,
                        ProcessingState.POST_PROCESSING)


@dataclass
class MemoTexts:
    """Raw, filler-removed and corrected text of one memo.

    Each slot is a separate string; editing one never touches the others.
    """
    raw: Optional[str] = None
    filler_removed: Optional[str] = None
    corrected: Optional[str] = None
    errors: Dict[TextSlot, str] = field(default_factory=dict)

    def get(self, slot: TextSlot) -> Optional[str]:
        return getattr(self, slot.value)

    def set(self, slot: TextSlot, text: Optional[str]) -> None:
        setattr(self, slot.value, text)

    def items(self):
        """Yield (slot, text) pairs for the slots that hold text."""
        for slot in TextSlot:
            text = self.get(slot)
            if text:
                yield slot, text
