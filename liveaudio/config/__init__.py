"""Recorder configuration and YAML configuration loader for liveaudio."""

import os
import yaml
from enum import Enum
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

logger = logging.getLogger(__name__)

# Chunk size used to collect the aggregate when streaming is disabled
# (100ms at 48kHz).
DEFAULT_CHUNK_SAMPLES = 4800
DEFAULT_SAMPLE_RATE = 48000


class ConfigurationError(ValueError):
    """Raised when recorder options are invalid."""


class ChunkUnit(Enum):
    """Unit in which ``chunk_size`` is expressed."""
    MILLISECONDS = "ms"
    SAMPLES = "samples"

    @classmethod
    def parse(cls, value: Union["ChunkUnit", str]) -> "ChunkUnit":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in ("ms", "milliseconds"):
                return cls.MILLISECONDS
            if normalized == "samples":
                return cls.SAMPLES
        raise ConfigurationError(
            f"expected chunk_unit to be 'ms' or 'samples', got: {value!r}")


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class RecorderConfig:
    """Immutable, validated settings for one recorder.

    Args:
        sample_rate: Capture sample rate in Hz
        chunk_size: Size of streamed chunks, or None to disable streaming
        chunk_unit: Unit of ``chunk_size`` (milliseconds or samples)
        flush_on_stop: Append the sub-chunk residue to the aggregate on stop
    """
    sample_rate: int = DEFAULT_SAMPLE_RATE
    chunk_size: Optional[int] = None
    chunk_unit: ChunkUnit = ChunkUnit.MILLISECONDS
    flush_on_stop: bool = False

    def __post_init__(self):
        if not _is_positive_int(self.sample_rate):
            raise ConfigurationError(
                f"expected sample_rate to be a positive integer, got: {self.sample_rate!r}")

        if self.chunk_size is not None and not _is_positive_int(self.chunk_size):
            raise ConfigurationError(
                f"expected chunk_size to be a positive integer or None, got: {self.chunk_size!r}")

        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "chunk_unit", ChunkUnit.parse(self.chunk_unit))
        object.__setattr__(self, "flush_on_stop", bool(self.flush_on_stop))

        if self.chunk_size is not None and self.chunk_size_in_samples == 0:
            raise ConfigurationError(
                f"chunk_size of {self.chunk_size}ms is shorter than one sample "
                f"at {self.sample_rate}Hz")

    @property
    def streaming_enabled(self) -> bool:
        """True when chunks are streamed to listeners."""
        return self.chunk_size is not None

    @property
    def chunk_size_in_samples(self) -> int:
        """Effective chunk length in samples."""
        if self.chunk_size is None:
            return DEFAULT_CHUNK_SAMPLES
        if self.chunk_unit is ChunkUnit.MILLISECONDS:
            return (self.chunk_size * self.sample_rate) // 1000
        return self.chunk_size

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "RecorderConfig":
        """Build a config from a plain dict, ignoring unknown keys."""
        kwargs = {}
        for key in ("sample_rate", "chunk_size", "flush_on_stop"):
            if key in options:
                kwargs[key] = options[key]
        # Accept the short ``unit`` spelling as well
        unit = options.get("chunk_unit", options.get("unit"))
        if unit is not None:
            kwargs["chunk_unit"] = unit
        return cls(**kwargs)


class LiveAudioConfig:
    """liveaudio YAML configuration loader."""

    def __init__(self, config_path: str):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file (e.g. liveaudio.yaml)
        """
        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if 'storage' in config and 'data_directory' in config['storage']:
            data_dir = config['storage']['data_directory']
            if not os.path.isabs(data_dir):
                config['storage']['data_directory'] = str(config_dir / data_dir)

        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'audio.sample_rate').

        Args:
            key_path: Dot-separated key path
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

        return value

    def get_recorder_config(self) -> RecorderConfig:
        """Build the validated recorder settings from the ``audio`` section.

        Raises:
            ConfigurationError: If any audio setting is invalid
        """
        audio = self.get('audio', {}) or {}
        if not isinstance(audio, dict):
            raise ConfigurationError("'audio' section must be a mapping")
        return RecorderConfig.from_dict(audio)

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())


__all__ = [
    "DEFAULT_CHUNK_SAMPLES",
    "DEFAULT_SAMPLE_RATE",
    "ChunkUnit",
    "ConfigurationError",
    "RecorderConfig",
    "LiveAudioConfig",
]
