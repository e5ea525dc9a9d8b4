"""Data models for the liveaudio package."""

from .audio import AudioStats, AudioChunk, BYTES_PER_SAMPLE, SAMPLE_DTYPE
from .session import SessionState, SessionInfo

__all__ = [
    "AudioStats",
    "AudioChunk",
    "BYTES_PER_SAMPLE",
    "SAMPLE_DTYPE",
    "SessionState",
    "SessionInfo",
]
