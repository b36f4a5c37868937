"""Container formats the recorder can produce, and MIME type helpers."""

import io
import wave
import logging
import mimetypes
from typing import Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES = (
    "audio/webm",
    "audio/mp4",
    "audio/mp3",
    "audio/wav",
    "audio/mpeg",
    "audio/ogg",
)

DEFAULT_MIME_TYPE = "audio/wav"

_EXTENSION_MIME_TYPES = {
    ".wav": "audio/wav",
    ".webm": "audio/webm",
    ".mp3": "audio/mp3",
    ".mp4": "audio/mp4",
    ".m4a": "audio/mp4",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".opus": "audio/ogg",
    ".flac": "audio/flac",
}

_MIME_EXTENSIONS = {
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/webm": ".webm",
    "audio/mp3": ".mp3",
    "audio/mpeg": ".mp3",
    "audio/mp4": ".m4a",
    "audio/ogg": ".ogg",
    "audio/flac": ".flac",
}


def wav_container(chunks: List[bytes], sample_rate: int, channels: int, sample_width: int) -> bytes:
    """Wrap raw PCM chunks in a WAV header."""
    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        for chunk in chunks:
            wf.writeframes(chunk)
    return buffer.getvalue()


# MIME type -> writer turning PCM chunks into container bytes
CONTAINER_WRITERS: Dict[str, Callable[[List[bytes], int, int, int], bytes]] = {
    "audio/wav": wav_container,
}


def is_type_supported(mime_type: str) -> bool:
    """True if the recorder can produce this container."""
    return mime_type in CONTAINER_WRITERS


def select_mime_type(candidates: Iterable[str],
                     is_supported: Callable[[str], bool] = is_type_supported) -> Optional[str]:
    """Return the first candidate the recorder supports, or None."""
    for mime_type in candidates:
        if is_supported(mime_type):
            logger.debug(f"Supported container format: {mime_type}")
            return mime_type
    return None


def build_container(mime_type: str, chunks: List[bytes], sample_rate: int,
                    channels: int = 1, sample_width: int = 2) -> bytes:
    """Concatenate recorded chunks into one payload of the given container type."""
    writer = CONTAINER_WRITERS.get(mime_type)
    if writer is None:
        raise ValueError(f"No container writer for {mime_type}")
    return writer(chunks, sample_rate, channels, sample_width)


def guess_mime_type(path: str) -> str:
    """Guess the audio MIME type of a file from its extension."""
    suffix = path[path.rfind('.'):].lower() if '.' in path else ''
    if suffix in _EXTENSION_MIME_TYPES:
        return _EXTENSION_MIME_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(path)
    if guessed and guessed.startswith("audio/"):
        return guessed
    logger.warning(f"Could not guess audio type of {path}, assuming {DEFAULT_MIME_TYPE}")
    return DEFAULT_MIME_TYPE


def extension_for_mime_type(mime_type: str) -> str:
    return _MIME_EXTENSIONS.get(mime_type.split(';')[0].strip(), ".bin")
