"""Services layer for koememo application logic."""

from .memo_session import MemoSession, describe_error
from .state_publisher import StatePublisher, STATE_TOPIC
from .builder import create_memo_session, create_audio_capture, create_pipeline

__all__ = [
    "MemoSession",
    "describe_error",
    "StatePublisher",
    "STATE_TOPIC",
    "create_memo_session",
    "create_audio_capture",
    "create_pipeline",
]
