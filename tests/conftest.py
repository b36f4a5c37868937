"""Pytest configuration and fixtures for koememo tests."""

import pytest
import tempfile
import logging
import wave
from pathlib import Path
from unittest.mock import Mock, patch
import numpy as np

from koememo.models.audio import AudioArtifact


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # 4000 samples = one 250 ms chunk at 16 kHz
    sample_rate = 16000
    samples = 4000
    t = np.linspace(0, samples / sample_rate, samples, False)
    wave_data = np.sin(2 * np.pi * 440 * t)

    audio_data = (wave_data * 32767 * 0.5).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 8000  # 250 ms of silence
        mock_stream.is_stopped.return_value = False
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {"name": "Mock Microphone"}

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def sample_audio_file(temp_data_dir, sample_audio_chunk):
    """Create a sample WAV file for testing."""
    file_path = Path(temp_data_dir) / "test_audio.wav"

    with wave.open(str(file_path), 'wb') as wf:
        wf.setnchannels(1)  # Mono
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(16000)  # 16kHz
        for _ in range(8):  # 2 seconds of audio
            wf.writeframes(sample_audio_chunk)

    return str(file_path)


@pytest.fixture
def sample_artifact(sample_audio_file):
    """A WAV AudioArtifact built from the sample file."""
    return AudioArtifact(
        data=Path(sample_audio_file).read_bytes(),
        mime_type="audio/wav",
        sample_rate=16000,
        duration_ms=2000,
    )


@pytest.fixture
def fake_engine():
    """Correction engine stub: records prompts and answers with a fixed text."""

    class FakeEngine:
        def __init__(self):
            self.prompts = []
            self.temperatures = []
            self.response = "今日は会議です。よろしくお願いします。"
            self.error = None

        async def send_prompt(self, prompt, temperature=0.2):
            self.prompts.append(prompt)
            self.temperatures.append(temperature)
            if self.error is not None:
                raise self.error
            return self.response

    return FakeEngine()


@pytest.fixture
def fake_backend():
    """Transcription backend stub with a configurable transcript."""
    from koememo.transcription.base import AbstractTranscriptionBackend

    class FakeBackend(AbstractTranscriptionBackend):
        provider = "fake"

        def __init__(self):
            super().__init__()
            self.calls = []
            self.transcript = "えーと、今日は会議です。えー、よろしくお願いします。"
            self.error = None
            self.cleaned_up = False

        async def transcribe(self, payload, mime_type):
            self._require_payload(payload, mime_type)
            self.calls.append((payload, mime_type))
            if self.error is not None:
                raise self.error
            return self.transcript

        async def cleanup(self):
            self.cleaned_up = True

    return FakeBackend()
