"""Unit tests for KoememoConfig."""

import pytest
import yaml
from pathlib import Path

from koememo.config import KoememoConfig
from koememo.exceptions import ConfigurationError, MissingCredentialError


def write_config(directory, data):
    path = Path(directory) / "koememo.yaml"
    path.write_text(yaml.safe_dump(data), encoding='utf-8')
    return str(path)


@pytest.mark.unit
class TestKoememoConfig:

    def test_defaults_without_file(self, temp_data_dir, monkeypatch):
        monkeypatch.chdir(temp_data_dir)
        config = KoememoConfig(environ={})

        assert config.config_file is None
        assert config.get('audio.sample_rate') == 16000
        assert config.get('audio.chunk_interval_ms') == 250
        assert config.get('audio.max_duration_ms') == 300000
        assert config.get('gemini.model') == "gemini-2.0-flash"
        assert config.use_speech_to_text_api is False
        assert config.get('missing.key', 'fallback') == 'fallback'

    def test_file_merged_over_defaults(self, temp_data_dir):
        path = write_config(temp_data_dir, {"audio": {"sample_rate": 48000}, "pipeline": {"mode": "sequential"}})
        config = KoememoConfig(path, environ={})

        assert config.get('audio.sample_rate') == 48000
        assert config.get('audio.channels') == 1
        assert config.get('pipeline.mode') == "sequential"

    def test_working_directory_file(self, temp_data_dir, monkeypatch):
        write_config(temp_data_dir, {"gemini": {"model": "gemini-1.5-pro"}})
        monkeypatch.chdir(temp_data_dir)

        assert KoememoConfig(environ={}).get('gemini.model') == "gemini-1.5-pro"

    def test_missing_explicit_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            KoememoConfig(str(Path(temp_data_dir) / "nope.yaml"))

    def test_invalid_yaml(self, temp_data_dir):
        path = Path(temp_data_dir) / "bad.yaml"
        path.write_text("audio: [unclosed", encoding='utf-8')

        with pytest.raises(ConfigurationError):
            KoememoConfig(str(path), environ={})

    def test_environment_overrides(self, temp_data_dir):
        path = write_config(temp_data_dir, {"gemini": {"api_key": "from-file"}})
        config = KoememoConfig(path, environ={
            "GEMINI_API_KEY": "from-env",
            "GEMINI_MODEL": "gemini-env",
            "KOEMEMO_USE_SPEECH_TO_TEXT_API": "true",
            "GOOGLE_SPEECH_API_KEY": "speech-key",
        })

        assert config.get_gemini_api_key() == "from-env"
        assert config.get('gemini.model') == "gemini-env"
        assert config.use_speech_to_text_api is True
        assert config.get_google_speech_credentials() == {"api_key": "speech-key", "credentials_path": None}

    def test_flag_false_strings(self, temp_data_dir, monkeypatch):
        monkeypatch.chdir(temp_data_dir)
        assert KoememoConfig(environ={"KOEMEMO_USE_SPEECH_TO_TEXT_API": "0"}).use_speech_to_text_api is False

    def test_relative_paths_resolved(self, temp_data_dir):
        path = write_config(temp_data_dir, {"storage": {"output_directory": "out"}})
        config = KoememoConfig(path, environ={})

        assert config.get('storage.output_directory') == str(Path(temp_data_dir) / "out")
        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "logs/koememo.log")

    def test_set_and_get(self, temp_data_dir, monkeypatch):
        monkeypatch.chdir(temp_data_dir)
        config = KoememoConfig(environ={})
        config.set('server.port', 9090)
        config.set('new.nested.key', 'value')

        assert config.get('server.port') == 9090
        assert config.get('new.nested.key') == 'value'

    def test_validate_gemini_requires_key(self, temp_data_dir, monkeypatch):
        monkeypatch.chdir(temp_data_dir)
        with pytest.raises(MissingCredentialError):
            KoememoConfig(environ={}).validate()

        KoememoConfig(environ={"GEMINI_API_KEY": "key"}).validate()

    def test_validate_speech_requires_credentials(self, temp_data_dir, monkeypatch):
        monkeypatch.chdir(temp_data_dir)
        config = KoememoConfig(environ={"GEMINI_API_KEY": "key", "KOEMEMO_USE_SPEECH_TO_TEXT_API": "1"})

        with pytest.raises(MissingCredentialError):
            config.validate()

    def test_environment_paths_relative_to_working_directory(self, temp_data_dir, monkeypatch):
        config_dir = Path(temp_data_dir) / "conf"
        work_dir = Path(temp_data_dir) / "work"
        config_dir.mkdir()
        work_dir.mkdir()
        (work_dir / "creds.json").write_text("{}", encoding='utf-8')
        path = write_config(config_dir, {"google_cloud": {"credentials_path": "file-creds.json"}})
        monkeypatch.chdir(work_dir)

        config = KoememoConfig(path, environ={"GOOGLE_APPLICATION_CREDENTIALS": "creds.json"})

        assert config.get('google_cloud.credentials_path') == "creds.json"
        creds_path = config.get_google_speech_credentials()["credentials_path"]
        assert Path(creds_path).resolve() == (work_dir / "creds.json").resolve()

    def test_file_paths_relative_to_config_file(self, temp_data_dir):
        path = write_config(temp_data_dir, {"google_cloud": {"credentials_path": "creds.json"}})

        config = KoememoConfig(path, environ={})

        assert config.get('google_cloud.credentials_path') == str(Path(temp_data_dir) / "creds.json")

    def test_missing_credentials_file(self, temp_data_dir, monkeypatch):
        monkeypatch.chdir(temp_data_dir)
        config = KoememoConfig(environ={"GOOGLE_APPLICATION_CREDENTIALS": "/nonexistent/creds.json"})

        with pytest.raises(MissingCredentialError):
            config.get_google_speech_credentials()

    def test_validate_openai_correction(self, temp_data_dir):
        path = write_config(temp_data_dir, {"correction": {"provider": "openai"}})

        with pytest.raises(MissingCredentialError):
            KoememoConfig(path, environ={"GEMINI_API_KEY": "key"}).validate()
        KoememoConfig(path, environ={"GEMINI_API_KEY": "key", "OPENAI_API_KEY": "sk"}).validate()

    def test_validate_unknown_mode(self, temp_data_dir):
        path = write_config(temp_data_dir, {"pipeline": {"mode": "parallel"}})

        with pytest.raises(ConfigurationError):
            KoememoConfig(path, environ={"GEMINI_API_KEY": "key"}).validate()
