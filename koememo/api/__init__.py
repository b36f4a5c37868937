"""HTTP API for koememo."""

from .server import create_app, handle_transcribe
from .models import TranscribeRequest, TranscribeResponse, ErrorResponse

__all__ = [
    "create_app",
    "handle_transcribe",
    "TranscribeRequest",
    "TranscribeResponse",
    "ErrorResponse",
]
