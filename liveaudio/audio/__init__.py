"""Audio capture and chunking module."""

from .base import AbstractAudioSource, AudioSourceError, PermissionDenied, DeviceUnavailable
from .chunker import SampleChunker
from .capture import PyAudioSource

__all__ = [
    'AbstractAudioSource',
    'AudioSourceError',
    'PermissionDenied',
    'DeviceUnavailable',
    'SampleChunker',
    'PyAudioSource'
]
