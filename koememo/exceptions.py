"""Exception hierarchy for koememo.

Every pipeline stage raises its own error type so the session orchestrator
can report a readable message instead of an underlying library exception.
"""

from typing import Optional


class KoememoError(Exception):
    """Base exception for koememo errors."""

    pass


class AudioCaptureError(KoememoError):
    """Exception raised for microphone capture problems."""

    pass


class MicrophonePermissionError(AudioCaptureError):
    """The microphone could not be opened (access denied or device busy)."""

    pass


class UnsupportedEnvironmentError(AudioCaptureError):
    """No audio recording facility is available on this machine."""

    pass


class EmptyRecordingError(AudioCaptureError):
    """The recording finished without capturing any audio bytes."""

    pass


class DecodeError(KoememoError):
    """Audio payload could not be converted to or from base64."""

    pass


class ConfigurationError(KoememoError):
    """Invalid or incomplete configuration."""

    pass


class MissingCredentialError(ConfigurationError):
    """A required API key or credentials file is not configured."""

    pass


class ProviderAPIError(KoememoError):
    """An HTTP call to an AI provider failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ContentBlockedError(ProviderAPIError):
    """The provider refused to answer because of its safety filters."""

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.reason = reason


class TranscriptionError(KoememoError):
    """Speech-to-text failed or returned nothing usable."""

    pass


class NoSpeechDetectedError(TranscriptionError):
    """The provider answered successfully but recognised no speech."""

    pass


class CorrectionError(KoememoError):
    """The text correction model failed or returned empty output."""

    pass


class DegenerateInputError(KoememoError):
    """A text transform received, or would produce, empty text."""

    pass


class SessionBusyError(KoememoError):
    """A recording was requested while a previous memo is still processing."""

    pass
