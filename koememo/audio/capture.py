"""Microphone capture: one start/stop cycle produces one AudioArtifact."""

import pyaudio
import logging
from threading import Thread, Event
from typing import Optional, Sequence
from datetime import datetime
import numpy as np

from ..exceptions import (
    AudioCaptureError,
    EmptyRecordingError,
    MicrophonePermissionError,
    UnsupportedEnvironmentError,
)
from ..models.audio import AudioArtifact, AudioStats, RecordingSession
from .formats import DEFAULT_MIME_TYPE, SUPPORTED_MIME_TYPES, build_container, select_mime_type


logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 16000
DEFAULT_CHUNK_INTERVAL_MS = 250
DEFAULT_MAX_DURATION_MS = 5 * 60 * 1000


class MicrophoneHandle:
    """PyAudio input stream that can stay open across recordings.

    States: released (no PyAudio instance, no stream) and acquired (stream
    open). ``acquire`` opens the stream or reuses the open one; ``release``
    closes everything.
    """

    def __init__(self, sample_rate: int, channels: int, frames_per_buffer: int,
                 format: int = pyaudio.paInt16):
        self.sample_rate = sample_rate
        self.channels = channels
        self.frames_per_buffer = frames_per_buffer
        self.format = format

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream: Optional[pyaudio.Stream] = None

    @property
    def is_acquired(self) -> bool:
        return self.stream is not None

    def _ensure_pyaudio(self) -> pyaudio.PyAudio:
        if self.pyaudio_instance is None:
            self.pyaudio_instance = pyaudio.PyAudio()
        return self.pyaudio_instance

    def check_available(self) -> None:
        """Verify that an input device exists, without opening it.

        Raises:
            UnsupportedEnvironmentError: PortAudio is unusable or has no input device
        """
        try:
            instance = self._ensure_pyaudio()
            device = instance.get_default_input_device_info()
        except OSError as e:
            self.release()
            raise UnsupportedEnvironmentError(f"No audio input device available: {e}") from e
        logger.debug(f"Default input device: {device.get('name', 'unknown')}")

    def acquire(self) -> pyaudio.Stream:
        """Open the input stream, or reuse the one kept from a previous recording."""
        if self.stream is not None:
            if self.stream.is_stopped():
                self.stream.start_stream()
            logger.debug("Reusing open microphone stream")
            return self.stream

        instance = self._ensure_pyaudio()
        try:
            self.stream = instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.frames_per_buffer,
                stream_callback=None
            )
        except OSError as e:
            raise MicrophonePermissionError(f"Could not open the microphone: {e}") from e

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.frames_per_buffer} samples/chunk")
        return self.stream

    def pause(self) -> None:
        """Stop the stream but keep it open for the next recording."""
        if self.stream is not None and not self.stream.is_stopped():
            self.stream.stop_stream()

    def release(self) -> None:
        """Close the stream and terminate PyAudio."""
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            finally:
                self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
            logger.debug("Microphone released")


class AudioCapture:
    """Records the microphone in fixed-interval chunks until stopped or the duration ceiling."""

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        channels: int = 1,
        chunk_interval_ms: int = DEFAULT_CHUNK_INTERVAL_MS,
        max_duration_ms: int = DEFAULT_MAX_DURATION_MS,
        mime_types: Sequence[str] = SUPPORTED_MIME_TYPES,
        retain_stream: bool = True,
        format: int = pyaudio.paInt16,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            sample_rate: Requested sample rate; the device may deliver another one
            channels: Number of audio channels (1 for mono)
            chunk_interval_ms: Length of audio read per chunk
            max_duration_ms: Recording is force-stopped once this much audio is captured
            mime_types: Container MIME types in order of preference
            retain_stream: Keep the microphone open between recordings
            format: PyAudio sample format (16-bit signed int)
        """
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_interval_ms = chunk_interval_ms
        self.chunk_size = int(sample_rate * chunk_interval_ms / 1000)
        self.max_duration_ms = max_duration_ms
        self.mime_types = tuple(mime_types)
        self.retain_stream = retain_stream
        self.format = format

        self.microphone = MicrophoneHandle(sample_rate, channels, self.chunk_size, format)
        self.session: Optional[RecordingSession] = None

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.stopped_event = Event()
        self.limit_reached = Event()
        self.is_recording = False

        # Set after a permission failure; start_recording refuses while set
        self.disabled_reason: Optional[str] = None
        self.capture_error: Optional[Exception] = None

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self.peak_level = 0.0

    @property
    def can_start(self) -> bool:
        return self.disabled_reason is None and not self.is_recording

    def start_recording(self) -> None:
        """Open the microphone and start recording in a background thread."""
        if self.disabled_reason:
            raise MicrophonePermissionError(self.disabled_reason)
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        self.microphone.check_available()

        mime_type = select_mime_type(self.mime_types)
        if mime_type is None:
            logger.warning(f"None of {self.mime_types} is supported, using {DEFAULT_MIME_TYPE}")
            mime_type = DEFAULT_MIME_TYPE

        logger.debug("Echo cancellation, noise suppression and auto gain are not "
                     "available through PyAudio; recording the raw input")
        try:
            stream = self.microphone.acquire()
        except MicrophonePermissionError as e:
            self.disabled_reason = str(e)
            logger.error(f"Microphone access failed, recording disabled: {e}")
            raise

        logger.info(f"Starting audio recording ({mime_type})")
        self.session = RecordingSession(
            mime_type=mime_type,
            sample_rate=self.sample_rate,
            channels=self.channels,
        )
        self.stop_event.clear()
        self.stopped_event.clear()
        self.limit_reached.clear()
        self.capture_error = None
        self.start_time = datetime.now()
        self.total_chunks = 0
        self.peak_level = 0.0

        self.recording_thread = Thread(
            target=self._record_continuously, args=(stream, self.session), daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> AudioArtifact:
        """Stop recording and return everything captured as one artifact.

        Raises:
            AudioCaptureError: no recording was started
            EmptyRecordingError: no audio bytes were captured
        """
        if self.session is None:
            raise AudioCaptureError("No recording in progress")

        logger.info("Stopping audio recording")
        self._join_recording_thread()

        session = self.session
        self.session = None
        self.is_recording = False
        if not self.retain_stream:
            self.microphone.release()

        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}, bytes: {session.total_bytes}")
        if self.capture_error is not None:
            logger.warning(f"Recording ended early: {self.capture_error}")

        if session.total_bytes == 0:
            raise EmptyRecordingError("No audio was captured")

        data = build_container(
            session.mime_type, session.chunks, session.sample_rate,
            session.channels, session.sample_width)
        return AudioArtifact(
            data=data,
            mime_type=session.mime_type,
            sample_rate=session.sample_rate,
            channels=session.channels,
            duration_ms=session.elapsed_ms,
        )

    def wait_until_stopped(self, timeout: Optional[float] = None) -> bool:
        """Block until the capture thread has stopped reading (stop or ceiling)."""
        return self.stopped_event.wait(timeout)

    def _join_recording_thread(self) -> None:
        self.stop_event.set()
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

    def _handle_chunk(self, session: RecordingSession, audio_chunk: bytes) -> None:
        if not audio_chunk:
            logger.warning("Received an empty audio chunk")
            return
        session.add_chunk(audio_chunk)
        self.total_chunks += 1

        samples = np.frombuffer(audio_chunk[:len(audio_chunk) - len(audio_chunk) % 2], dtype=np.int16)
        if samples.size:
            self.peak_level = float(np.abs(samples.astype(np.int32)).max()) / 32768.0

    def _record_continuously(self, stream: pyaudio.Stream, session: RecordingSession) -> None:
        """Internal method: continuous recording loop in background thread."""
        try:
            while not self.stop_event.is_set():
                audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
                self._handle_chunk(session, audio_chunk)

                if session.elapsed_ms >= self.max_duration_ms:
                    logger.info(f"Maximum recording duration reached ({self.max_duration_ms} ms)")
                    self.limit_reached.set()
                    self.stop_event.set()
        except OSError as e:
            logger.error(f"Audio stream read failed: {e}")
            self.capture_error = e
        finally:
            if self.retain_stream:
                self.microphone.pause()
            self.stopped_event.set()

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time and self.is_recording:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
            peak_level=self.peak_level,
        )

    def close(self) -> None:
        """Stop any recording and release the microphone."""
        if self.is_recording:
            self._join_recording_thread()
            self.is_recording = False
            self.session = None
        self.microphone.release()

    def __enter__(self) -> "AudioCapture":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if self.is_recording or self.microphone.is_acquired:
            self.close()
