"""Unit tests for recorder configuration and the YAML loader."""

import pytest
from pathlib import Path

from liveaudio.config import (
    DEFAULT_CHUNK_SAMPLES,
    ChunkUnit,
    ConfigurationError,
    LiveAudioConfig,
    RecorderConfig,
)


@pytest.mark.unit
class TestRecorderConfig:
    """Test cases for RecorderConfig validation."""

    def test_defaults(self):
        config = RecorderConfig()

        assert config.sample_rate == 48000
        assert config.chunk_size is None
        assert config.chunk_unit is ChunkUnit.MILLISECONDS
        assert config.flush_on_stop is False
        assert config.streaming_enabled is False
        assert config.chunk_size_in_samples == DEFAULT_CHUNK_SAMPLES

    def test_chunk_size_in_samples(self):
        config = RecorderConfig(sample_rate=16000, chunk_size=480, chunk_unit="samples")

        assert config.chunk_unit is ChunkUnit.SAMPLES
        assert config.chunk_size_in_samples == 480
        assert config.streaming_enabled is True

    def test_chunk_size_in_milliseconds(self):
        config = RecorderConfig(sample_rate=16000, chunk_size=30, chunk_unit="ms")

        assert config.chunk_size_in_samples == 480

    def test_milliseconds_are_floored(self):
        config = RecorderConfig(sample_rate=44100, chunk_size=10, chunk_unit=ChunkUnit.MILLISECONDS)

        assert config.chunk_size_in_samples == 441
        assert RecorderConfig(sample_rate=22050, chunk_size=1).chunk_size_in_samples == 22

    @pytest.mark.parametrize("unit", ["ms", "MS", "milliseconds", " Milliseconds "])
    def test_millisecond_unit_spellings(self, unit):
        assert RecorderConfig(chunk_size=10, chunk_unit=unit).chunk_unit is ChunkUnit.MILLISECONDS

    @pytest.mark.parametrize("sample_rate", [-1, 0, 16000.0, "16000", True, None])
    def test_invalid_sample_rate(self, sample_rate):
        with pytest.raises(ConfigurationError):
            RecorderConfig(sample_rate=sample_rate)

    @pytest.mark.parametrize("chunk_size", [0, -5, 2.5, "30", False])
    def test_invalid_chunk_size(self, chunk_size):
        with pytest.raises(ConfigurationError):
            RecorderConfig(chunk_size=chunk_size)

    @pytest.mark.parametrize("unit", ["seconds", "", None, 3])
    def test_invalid_chunk_unit(self, unit):
        with pytest.raises(ConfigurationError):
            RecorderConfig(chunk_size=10, chunk_unit=unit)

    def test_chunk_shorter_than_one_sample_rejected(self):
        with pytest.raises(ConfigurationError):
            RecorderConfig(sample_rate=500, chunk_size=1, chunk_unit="ms")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            RecorderConfig(sample_rate=-1)

    def test_config_is_immutable(self):
        config = RecorderConfig()

        with pytest.raises(AttributeError):
            config.sample_rate = 16000

    def test_from_dict(self):
        config = RecorderConfig.from_dict({
            "sample_rate": 16000,
            "chunk_size": 20,
            "unit": "samples",
            "channels": 1,
        })

        assert config.chunk_unit is ChunkUnit.SAMPLES
        assert config.chunk_size_in_samples == 20


@pytest.mark.unit
class TestLiveAudioConfig:
    """Test cases for the YAML configuration loader."""

    def _write(self, temp_data_dir, text):
        path = Path(temp_data_dir) / "liveaudio.yaml"
        path.write_text(text)
        return path

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            LiveAudioConfig(str(Path(temp_data_dir) / "missing.yaml"))

    def test_empty_file(self, temp_data_dir):
        path = self._write(temp_data_dir, "")

        with pytest.raises(ValueError):
            LiveAudioConfig(str(path))

    def test_invalid_yaml(self, temp_data_dir):
        path = self._write(temp_data_dir, "audio: [unclosed\n")

        with pytest.raises(ValueError):
            LiveAudioConfig(str(path))

    def test_get(self, temp_data_dir):
        path = self._write(temp_data_dir, "audio:\n  sample_rate: 16000\n")
        config = LiveAudioConfig(str(path))

        assert config.get("audio.sample_rate") == 16000
        assert config.get("audio.missing", "default") == "default"

        assert config.get("audio.sample_rate.nested") is None

    def test_relative_paths_resolved_against_config_dir(self, temp_data_dir):
        path = self._write(temp_data_dir, (
            "storage:\n  data_directory: data\n"
            "logging:\n  file_path: logs/liveaudio.log\n"
        ))
        config = LiveAudioConfig(str(path))

        assert config.get("storage.data_directory") == str(Path(temp_data_dir) / "data")
        assert config.get("logging.file_path") == str(Path(temp_data_dir) / "logs/liveaudio.log")

    def test_get_recorder_config(self, temp_data_dir):
        path = self._write(temp_data_dir, (
            "audio:\n  sample_rate: 16000\n  chunk_size: 30\n  chunk_unit: ms\n"
        ))

        recorder_config = LiveAudioConfig(str(path)).get_recorder_config()

        assert recorder_config.chunk_size_in_samples == 480

    def test_get_recorder_config_invalid(self, temp_data_dir):
        path = self._write(temp_data_dir, "audio:\n  sample_rate: -1\n")

        with pytest.raises(ConfigurationError):
            LiveAudioConfig(str(path)).get_recorder_config()
