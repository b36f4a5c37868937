"""Audio capture and transport module."""

from .capture import AudioCapture, MicrophoneHandle
from .codec import encode, decode, to_data_url
from .formats import SUPPORTED_MIME_TYPES, DEFAULT_MIME_TYPE, select_mime_type, guess_mime_type

__all__ = [
    'AudioCapture',
    'MicrophoneHandle',
    'encode',
    'decode',
    'to_data_url',
    'SUPPORTED_MIME_TYPES',
    'DEFAULT_MIME_TYPE',
    'select_mime_type',
    'guess_mime_type',
]
