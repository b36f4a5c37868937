"""Audio-related data models."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    peak_level: float = 0.0


@dataclass
class RecordingSession:
    """Chunks accumulated during one start/stop cycle of the microphone."""
    mime_type: str
    sample_rate: int
    channels: int = 1
    sample_width: int = 2  # 16-bit audio
    chunks: List[bytes] = field(default_factory=list)
    total_bytes: int = 0

    def add_chunk(self, data: bytes) -> None:
        if not data:
            return
        self.chunks.append(data)
        self.total_bytes += len(data)

    @property
    def elapsed_ms(self) -> int:
        bytes_per_second = self.sample_rate * self.channels * self.sample_width
        return int(self.total_bytes * 1000 / bytes_per_second)


@dataclass(frozen=True)
class AudioArtifact:
    """A finished recording: container bytes tagged with their MIME type."""
    data: bytes
    mime_type: str
    sample_rate: Optional[int] = None
    channels: int = 1
    duration_ms: Optional[int] = None

    @property
    def size(self) -> int:
        return len(self.data)
