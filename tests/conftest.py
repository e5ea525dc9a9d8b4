"""Pytest configuration and fixtures for liveaudio tests."""

import pytest
import tempfile
import logging
from unittest.mock import Mock, patch
import numpy as np

from liveaudio.audio.base import AbstractAudioSource


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without hardware")
    config.addinivalue_line("markers", "integration: multi-component tests with mocked PyAudio")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


class FakeAudioSource(AbstractAudioSource):
    """Synchronous audio source: tests push blocks by hand."""

    def __init__(self, error=None):
        self.error = error
        self.on_samples = None
        self.on_error = None
        self.open_calls = []
        self.close_calls = []

    @property
    def is_open(self):
        return self.on_samples is not None

    def open(self, sample_rate, channels, on_samples, on_error=None):
        self.open_calls.append((sample_rate, channels))
        if self.error is not None:
            raise self.error
        self.on_samples = on_samples
        self.on_error = on_error
        return f"handle-{len(self.open_calls)}"

    def close(self, handle):
        self.close_calls.append(handle)
        self.on_samples = None
        self.on_error = None

    def push(self, block):
        assert self.on_samples is not None, "source is not open"
        self.on_samples(np.asarray(block, dtype=np.float32))

    def fail(self, error):
        """Report a capture failure as the capture thread would."""
        assert self.on_error is not None, "source is not open"
        self.on_error(error)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def fake_source():
    return FakeAudioSource()


@pytest.fixture
def mock_bridge():
    """Bridge double recording every publish call."""
    return Mock()


@pytest.fixture
def ramp():
    """Float32 samples whose values equal their index, for order checks."""
    def generate(count, start=0):
        return np.arange(start, start + count, dtype=np.float32)
    return generate


@pytest.fixture
def sine_samples():
    """One second of a 440Hz sine at 16kHz in [-1, 1]."""
    t = np.linspace(0, 1.0, 16000, False)
    return (0.5 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # 1024 silent float32 samples
        mock_stream.read.return_value = b'\x00' * 4096
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def source_class():
    """The fake source type, for tests that configure or subclass it."""
    return FakeAudioSource
