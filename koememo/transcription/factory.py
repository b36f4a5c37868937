"""Build providers from configuration."""

import logging
from typing import Optional

from ..config import KoememoConfig
from ..exceptions import ConfigurationError
from .base import AbstractTranscriptionBackend
from .chatgpt_engine import ChatGPTEngine
from .gemini_backend import GeminiTranscriptionBackend
from .gemini_client import GeminiClient
from .google_backend import GoogleSpeechBackend

logger = logging.getLogger(__name__)


def create_gemini_client(config: KoememoConfig) -> GeminiClient:
    return GeminiClient(
        api_key=config.get_gemini_api_key(),
        model=config.get('gemini.model'),
        base_url=config.get('gemini.base_url'),
        top_k=config.get('gemini.top_k', 32),
        top_p=config.get('gemini.top_p', 0.95),
        max_output_tokens=config.get('gemini.max_output_tokens', 2048),
        timeout_seconds=config.get('gemini.timeout_seconds', 60.0),
    )


def create_transcription_backend(config: KoememoConfig,
                                 gemini_client: Optional[GeminiClient] = None) -> AbstractTranscriptionBackend:
    """Create the transcription backend selected by transcription.use_speech_to_text_api."""
    if config.use_speech_to_text_api:
        credentials = config.get_google_speech_credentials()
        language = config.get('google_cloud.language', 'ja-JP')
        enable_punctuation = config.get('google_cloud.enable_automatic_punctuation', True)

        logger.info("Initializing Google Speech backend...")
        logger.debug(f"Config: language={language}, punctuation={enable_punctuation}")
        # the gRPC client is created on first use, inside the event loop
        return GoogleSpeechBackend(
            api_key=credentials['api_key'],
            credentials_path=credentials['credentials_path'],
            language=language,
            enable_automatic_punctuation=enable_punctuation,
            timeout=config.get('google_cloud.timeout_seconds', 60.0),
        )

    logger.info("Initializing Gemini transcription backend...")
    return GeminiTranscriptionBackend(
        client=gemini_client or create_gemini_client(config),
        temperature=config.get('gemini.temperature', 0.0),
    )


def create_correction_engine(config: KoememoConfig, gemini_client: Optional[GeminiClient] = None):
    """Create the text model used for correction (correction.provider)."""
    provider = config.get('correction.provider', 'gemini')
    if provider == 'gemini':
        return gemini_client or create_gemini_client(config)
    if provider == 'openai':
        return ChatGPTEngine(
            api_key=config.get_openai_api_key(),
            model=config.get('openai.model', 'gpt-4o-mini'),
        )
    raise ConfigurationError(f"Unknown correction provider: {provider}")
