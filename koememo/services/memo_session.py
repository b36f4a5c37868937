"""Memo session: drives one memo from recording to post-processed text."""

import logging
from typing import Optional

from ..audio.capture import AudioCapture
from ..audio.codec import encode
from ..cleanup.pipeline import PostProcessingPipeline
from ..exceptions import (
    AudioCaptureError,
    CorrectionError,
    DecodeError,
    DegenerateInputError,
    EmptyRecordingError,
    KoememoError,
    MicrophonePermissionError,
    MissingCredentialError,
    NoSpeechDetectedError,
    SessionBusyError,
    TranscriptionError,
    UnsupportedEnvironmentError,
)
from ..models.audio import AudioArtifact
from ..models.session import MemoTexts, ProcessingState
from ..models.transcription import TextSlot, TranscriptionRequest
from ..transcription.base import AbstractTranscriptionBackend
from .state_publisher import StatePublisher

logger = logging.getLogger(__name__)

# most specific first
_ERROR_PREFIXES = (
    (MicrophonePermissionError, "Microphone access was denied"),
    (UnsupportedEnvironmentError, "Audio recording is not supported on this machine"),
    (EmptyRecordingError, "Nothing was recorded"),
    (AudioCaptureError, "Recording failed"),
    (DecodeError, "Could not prepare the audio for upload"),
    (MissingCredentialError, "API credentials are missing"),
    (NoSpeechDetectedError, "No speech was recognised"),
    (TranscriptionError, "Transcription failed"),
    (CorrectionError, "Correction failed"),
    (DegenerateInputError, "There was no text to process"),
)


def describe_error(error: Exception) -> str:
    """Turn an exception into a message for the user."""
    for error_type, prefix in _ERROR_PREFIXES:
        if isinstance(error, error_type):
            return f"{prefix}: {error}"
    if isinstance(error, KoememoError):
        return str(error)
    return f"Unexpected error: {error}"


class MemoSession:
    """Owns the ProcessingState machine and the three text slots of the current memo."""

    def __init__(self,
                 capture: Optional[AudioCapture],
                 backend: AbstractTranscriptionBackend,
                 pipeline: PostProcessingPipeline,
                 publisher: Optional[StatePublisher] = None):
        """Initialize memo session.

        Args:
            capture: Microphone capture (None for file-only sessions)
            backend: Transcription backend selected by configuration
            pipeline: Post-processing pipeline
            publisher: Optional state change publisher
        """
        self.capture = capture
        self.backend = backend
        self.pipeline = pipeline
        self.publisher = publisher

        self.state = ProcessingState.IDLE
        self.texts = MemoTexts()
        self.error_message: Optional[str] = None
        self.last_artifact: Optional[AudioArtifact] = None

    @property
    def can_start_recording(self) -> bool:
        if self.state.is_busy or self.capture is None:
            return False
        return self.capture.can_start

    def _set_state(self, state: ProcessingState) -> None:
        logger.info(f"Memo state: {self.state.value} -> {state.value}")
        self.state = state
        if self.publisher:
            self.publisher.publish_state(state, self.texts, self.error_message)

    def _fail(self, error: Exception) -> None:
        if isinstance(error, KoememoError):
            logger.error(f"Memo processing failed: {error}")
        else:
            logger.exception("Unexpected error while processing memo")
        self.error_message = describe_error(error)
        self._set_state(ProcessingState.ERRORED)

    def _begin_new_memo(self) -> None:
        if self.state.is_busy:
            raise SessionBusyError(f"A memo is still being processed ({self.state.value})")
        self.texts = MemoTexts()
        self.error_message = None
        self.last_artifact = None

    def start_recording(self) -> bool:
        """Start a new memo; previous texts are discarded.

        Returns:
            True if the microphone is recording, False if capture failed
            (see error_message)

        Raises:
            SessionBusyError: the previous memo is still in flight
        """
        if self.capture is None:
            raise AudioCaptureError("This session has no microphone")
        self._begin_new_memo()

        try:
            self.capture.start_recording()
        except AudioCaptureError as e:
            self._fail(e)
            return False

        self._set_state(ProcessingState.RECORDING)
        return True

    async def stop_recording(self) -> MemoTexts:
        """Stop the microphone and run transcription and post-processing."""
        if self.state is not ProcessingState.RECORDING or self.capture is None:
            raise AudioCaptureError("No recording in progress")

        try:
            artifact = self.capture.stop_recording()
        except AudioCaptureError as e:
            self._fail(e)
            return self.texts

        return await self._process(artifact)

    async def process_artifact(self, artifact: AudioArtifact) -> MemoTexts:
        """Transcribe and post-process an existing recording as a new memo."""
        self._begin_new_memo()
        return await self._process(artifact)

    async def _process(self, artifact: AudioArtifact) -> MemoTexts:
        self.last_artifact = artifact
        logger.info(f"Processing recording: {artifact.size} bytes, {artifact.mime_type}")
        self._set_state(ProcessingState.TRANSCRIBING)

        try:
            request = TranscriptionRequest(
                payload=encode(artifact),
                mime_type=artifact.mime_type,
                provider=self.backend.provider,
            )
            self.texts.raw = await self.backend.transcribe(request.payload, request.mime_type)

            self._set_state(ProcessingState.POST_PROCESSING)
            result = await self.pipeline.run(self.texts.raw)
        except Exception as e:
            self._fail(e)
            return self.texts

        self.texts.filler_removed = result.filler_removed
        self.texts.corrected = result.corrected
        self.texts.errors = dict(result.errors)
        if result.errors:
            self.error_message = "; ".join(
                f"{slot.value}: {message}" for slot, message in result.errors.items())

        self._set_state(ProcessingState.DONE)
        return self.texts

    def edit(self, slot: TextSlot, text: str) -> None:
        """Replace the text of one slot; the other slots are untouched."""
        if self.state.is_busy:
            raise SessionBusyError("Texts cannot be edited while the memo is being processed")
        self.texts.set(slot, text)
        logger.debug(f"Edited {slot.value} ({len(text)} chars)")

    def reset(self) -> None:
        """Discard the current memo and return to idle."""
        self._begin_new_memo()
        self._set_state(ProcessingState.IDLE)

    def close(self) -> None:
        """Release the microphone."""
        if self.capture is not None:
            self.capture.close()
