"""YAML configuration loader for koememo, with environment overrides."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..exceptions import ConfigurationError, MissingCredentialError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "koememo.yaml"

DEFAULTS: Dict[str, Any] = {
    "audio": {
        "sample_rate": 16000,
        "channels": 1,
        "chunk_interval_ms": 250,
        "max_duration_ms": 300000,
        "retain_stream": True,
        "mime_types": [
            "audio/webm",
            "audio/mp4",
            "audio/mp3",
            "audio/wav",
            "audio/mpeg",
            "audio/ogg",
        ],
    },
    "transcription": {
        "use_speech_to_text_api": False,
    },
    "gemini": {
        "api_key": None,
        "model": "gemini-2.0-flash",
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "temperature": 0.0,
        "top_k": 32,
        "top_p": 0.95,
        "max_output_tokens": 2048,
        "timeout_seconds": 60.0,
    },
    "google_cloud": {
        "api_key": None,
        "credentials_path": None,
        "language": "ja-JP",
        "enable_automatic_punctuation": True,
        "timeout_seconds": 60.0,
    },
    "correction": {
        "provider": "gemini",
        "temperature": 0.2,
        "combined_temperature": 0.5,
    },
    "openai": {
        "api_key": None,
        "model": "gpt-4o-mini",
    },
    "pipeline": {
        "mode": "concurrent",
    },
    "storage": {
        "output_directory": "memos",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
    },
    "logging": {
        "level": "INFO",
        "file_path": "logs/koememo.log",
        "console_output": True,
    },
}

# environment variable -> dot path
ENV_OVERRIDES = {
    "GEMINI_API_KEY": "gemini.api_key",
    "GEMINI_MODEL": "gemini.model",
    "GOOGLE_SPEECH_API_KEY": "google_cloud.api_key",
    "GOOGLE_APPLICATION_CREDENTIALS": "google_cloud.credentials_path",
    "KOEMEMO_USE_SPEECH_TO_TEXT_API": "transcription.use_speech_to_text_api",
    "OPENAI_API_KEY": "openai.api_key",
}

_TRUE_STRINGS = ("1", "true", "yes", "on")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class KoememoConfig:
    """koememo configuration loader."""

    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, koememo.yaml in the
                        current directory is used when present, otherwise only
                        defaults and environment variables apply.
            environ: Environment mapping to read overrides from (defaults to os.environ)
        """
        if config_path:
            self.config_file: Optional[Path] = Path(config_path)
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")
        else:
            candidate = Path.cwd() / DEFAULT_CONFIG_FILENAME
            self.config_file = candidate if candidate.exists() else None

        self.environ = os.environ if environ is None else environ

        file_config: Dict[str, Any] = {}
        if self.config_file:
            logger.info(f"Loading configuration from: {self.config_file}")
            file_config = self._load_config()
        else:
            logger.info("No configuration file found, using defaults and environment")

        self.config = _deep_merge(DEFAULTS, file_config)
        # paths from the file are relative to the file, paths from the environment to the cwd
        if self.config_file:
            self._resolve_paths(self.config)
        self._apply_environment()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration: {e}") from e

        if not config:
            raise ConfigurationError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file must contain a mapping at the top level")

        logger.info("Configuration loaded successfully")
        return config

    def _apply_environment(self) -> None:
        for env_name, key_path in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if not value:
                continue
            if key_path == "transcription.use_speech_to_text_api":
                self.set(key_path, value.strip().lower() in _TRUE_STRINGS)
            else:
                self.set(key_path, value)
            logger.debug(f"Configuration key '{key_path}' taken from ${env_name}")

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for section, key in (('google_cloud', 'credentials_path'),
                             ('storage', 'output_directory'),
                             ('logging', 'file_path')):
            path = config.get(section, {}).get(key)
            if path and not os.path.isabs(path):
                config[section][key] = str(config_dir / path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'gemini.model').

        Args:
            key_path: Dot-separated key path (e.g., 'google_cloud.credentials_path')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return default if value is None else value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'pipeline.mode')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict or not isinstance(config_dict[key], dict):
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set")

    @property
    def use_speech_to_text_api(self) -> bool:
        return bool(self.get('transcription.use_speech_to_text_api', False))

    def get_gemini_api_key(self) -> str:
        """Get Gemini API key - raises MissingCredentialError if not set."""
        api_key = self.get('gemini.api_key')
        if not api_key:
            raise MissingCredentialError(
                "Gemini API key is not configured (set GEMINI_API_KEY or gemini.api_key)")
        return api_key

    def get_google_speech_credentials(self) -> Dict[str, Optional[str]]:
        """Get the API key or service account file for Google Speech-to-Text.

        Returns:
            Dict with 'api_key' and 'credentials_path', at least one of them set
        """
        api_key = self.get('google_cloud.api_key')
        creds_path = self.get('google_cloud.credentials_path')
        if not api_key and not creds_path:
            raise MissingCredentialError(
                "Google Speech-to-Text credentials are not configured "
                "(set GOOGLE_SPEECH_API_KEY or GOOGLE_APPLICATION_CREDENTIALS)")
        if not api_key and not Path(creds_path).exists():
            raise MissingCredentialError(f"Google credentials file not found: {creds_path}")
        return {
            "api_key": api_key,
            "credentials_path": str(Path(creds_path).absolute()) if creds_path else None,
        }

    def get_openai_api_key(self) -> str:
        api_key = self.get('openai.api_key')
        if not api_key:
            raise MissingCredentialError(
                "OpenAI API key is not configured (set OPENAI_API_KEY or openai.api_key)")
        return api_key

    def validate(self) -> None:
        """Check that every credential the selected providers need is present.

        Raises:
            MissingCredentialError: a required key is absent
            ConfigurationError: an option has an unknown value
        """
        if self.use_speech_to_text_api:
            self.get_google_speech_credentials()
        else:
            self.get_gemini_api_key()

        provider = self.get('correction.provider', 'gemini')
        if provider == 'gemini':
            self.get_gemini_api_key()
        elif provider == 'openai':
            self.get_openai_api_key()
        else:
            raise ConfigurationError(f"Unknown correction provider: {provider}")

        mode = self.get('pipeline.mode', 'concurrent')
        if mode not in ('concurrent', 'sequential'):
            raise ConfigurationError(f"Unknown pipeline mode: {mode}")

    def get_output_directory(self) -> str:
        """Get directory for exported memos."""
        output_dir = self.get('storage.output_directory', 'memos')
        return str(Path(output_dir).absolute())
