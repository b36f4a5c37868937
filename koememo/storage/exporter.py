"""Writes memo texts (and optionally the recording) to files."""

import logging
import random
import string
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional

from ..audio.formats import extension_for_mime_type
from ..models.audio import AudioArtifact
from ..models.session import MemoTexts
from ..models.transcription import TextSlot


logger = logging.getLogger(__name__)

FILENAME_PREFIXES = {
    TextSlot.RAW: "transcript",
    TextSlot.FILLER_REMOVED: "filler_removed",
    TextSlot.CORRECTED: "corrected",
}


class MemoExporter:
    """Saves memos under output_dir/<session_id>/."""

    def __init__(self, output_dir: str = "./memos"):
        """Initialize exporter with output directory.

        Args:
            output_dir: Base directory for exported memos
        """
        self.output_dir = Path(output_dir)
        logger.info(f"MemoExporter initialized with output_dir: {self.output_dir}")

    def create_session_directory(self) -> str:
        """Create new session directory with timestamp and random suffix.

        Returns:
            Session ID (timestamp-based with random suffix)
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        session_id = f"{timestamp}_{random_suffix}"
        session_path = self.output_dir / session_id
        session_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"Created session directory: {session_path}")
        return session_id

    @staticmethod
    def filename_for(slot: TextSlot, day: Optional[datetime] = None) -> str:
        day = day or datetime.now()
        return f"{FILENAME_PREFIXES[slot]}_{day.strftime('%Y-%m-%d')}.txt"

    def save_text(self, text: str, slot: TextSlot, session_id: str) -> str:
        """Write one text slot and return the file path."""
        file_path = self.output_dir / session_id / self.filename_for(slot)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(text, encoding='utf-8')
        logger.info(f"Saved {slot.value} text to {file_path}")
        return str(file_path)

    def save_texts(self, texts: MemoTexts, session_id: Optional[str] = None) -> Dict[TextSlot, str]:
        """Write every non-empty slot. Returns slot -> file path."""
        session_id = session_id or self.create_session_directory()
        return {slot: self.save_text(text, slot, session_id) for slot, text in texts.items()}

    def save_audio(self, artifact: AudioArtifact, session_id: str) -> str:
        """Write the recording next to its texts."""
        file_path = self.output_dir / session_id / f"recording{extension_for_mime_type(artifact.mime_type)}"
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(artifact.data)
        logger.info(f"Audio saved to {file_path} ({artifact.size} bytes)")
        return str(file_path)
