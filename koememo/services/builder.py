"""Wires configuration into a ready MemoSession."""

import logging
from typing import Optional

from ..audio.capture import AudioCapture
from ..cleanup.corrector import TranscriptCorrector
from ..cleanup.filler import FillerRemover
from ..cleanup.pipeline import PostProcessingPipeline
from ..config import KoememoConfig
from ..transcription.factory import (
    create_correction_engine,
    create_gemini_client,
    create_transcription_backend,
)
from .memo_session import MemoSession
from .state_publisher import StatePublisher

logger = logging.getLogger(__name__)


def create_audio_capture(config: KoememoConfig) -> AudioCapture:
    return AudioCapture(
        sample_rate=config.get('audio.sample_rate', 16000),
        channels=config.get('audio.channels', 1),
        chunk_interval_ms=config.get('audio.chunk_interval_ms', 250),
        max_duration_ms=config.get('audio.max_duration_ms', 300000),
        mime_types=config.get('audio.mime_types'),
        retain_stream=config.get('audio.retain_stream', True),
    )


def create_pipeline(config: KoememoConfig, gemini_client=None) -> PostProcessingPipeline:
    corrector = TranscriptCorrector(
        engine=create_correction_engine(config, gemini_client),
        temperature=config.get('correction.temperature', 0.2),
        combined_temperature=config.get('correction.combined_temperature', 0.5),
    )
    return PostProcessingPipeline(
        filler_remover=FillerRemover(),
        corrector=corrector,
        mode=config.get('pipeline.mode', 'concurrent'),
    )


def create_memo_session(config: KoememoConfig, with_microphone: bool = True,
                        publisher: Optional[StatePublisher] = None) -> MemoSession:
    """Validate credentials and build every component of a memo session.

    Raises:
        MissingCredentialError: a key needed by the selected providers is absent
    """
    config.validate()

    # one Gemini client shared by transcription and correction
    gemini_client = None
    if not config.use_speech_to_text_api or config.get('correction.provider', 'gemini') == 'gemini':
        gemini_client = create_gemini_client(config)

    backend = create_transcription_backend(config, gemini_client)
    pipeline = create_pipeline(config, gemini_client)
    capture = create_audio_capture(config) if with_microphone else None

    logger.info(f"Memo session ready: backend={backend.provider}, pipeline={pipeline.mode}")
    return MemoSession(capture=capture, backend=backend, pipeline=pipeline,
                       publisher=publisher or StatePublisher())
