"""Host bridge message contract: wire format, message builders, topics and commands."""

from enum import Enum
from typing import Iterable, Union

import numpy as np

from ..models.audio import AudioChunk, BYTES_PER_SAMPLE, SAMPLE_DTYPE
from ..models.events import AggregateMessage, ChunkMessage, StatusEvent

PCM_FORMAT = "pcm_f32le"
DEFAULT_TOPIC_ROOT = "liveaudio"

STATUS_IDLE = "idle"
STATUS_RECORDING = "recording"
STATUS_STOPPED = "stopped"
STATUS_ERROR = "error"


class Command(Enum):
    """Inbound zero-payload control commands."""
    START = "start"
    STOP = "stop"
    CLEAR = "clear"


def parse_command(command: Union[Command, str]) -> Command:
    """Normalize a command given as enum member or string.

    Raises:
        ValueError: If the command is not recognized
    """
    if isinstance(command, Command):
        return command
    if isinstance(command, str):
        try:
            return Command(command.strip().lower())
        except ValueError:
            pass
    raise ValueError(f"Unknown command: {command!r}")


class Topics:
    """Pub/sub topic names for one recorder."""

    def __init__(self, root: str = DEFAULT_TOPIC_ROOT):
        self.root = root
        self.chunk = f"{root}.chunk"
        self.aggregate = f"{root}.aggregate"
        self.status = f"{root}.status"
        self.command = f"{root}.command"


def encode_samples(samples: Union[np.ndarray, Iterable[float]]) -> bytes:
    """Serialize float samples as pcm_f32le. Values are not clamped."""
    return np.asarray(samples, dtype=SAMPLE_DTYPE).tobytes()


def decode_samples(payload: bytes) -> np.ndarray:
    """Read-only float32 view over a pcm_f32le payload."""
    if len(payload) % BYTES_PER_SAMPLE:
        raise ValueError(f"payload length {len(payload)} is not a multiple of {BYTES_PER_SAMPLE}")
    return np.frombuffer(payload, dtype=SAMPLE_DTYPE)


def build_chunk_message(chunk: AudioChunk) -> ChunkMessage:
    """Wrap an emitted chunk; the payload is shared, not copied."""
    info = {
        "format": PCM_FORMAT,
        "sample_rate": chunk.sample_rate,
        "channels": chunk.channels,
        "sample_count": chunk.sample_count,
        "byte_size": chunk.byte_size,
        "timestamp": chunk.timestamp,
        "sequence_number": chunk.sequence_number,
    }
    return ChunkMessage(info=info, payload=chunk.payload)


def build_aggregate_message(payload: bytes, sample_rate: int, duration_seconds: float,
                            chunk_count: int) -> AggregateMessage:
    info = {
        "format": PCM_FORMAT,
        "sample_rate": sample_rate,
        "channels": 1,
        "sample_count": len(payload) // BYTES_PER_SAMPLE,
        "byte_size": len(payload),
        "duration_seconds": duration_seconds,
        "chunk_count": chunk_count,
    }
    return AggregateMessage(info=info, payload=payload)


__all__ = [
    "PCM_FORMAT",
    "DEFAULT_TOPIC_ROOT",
    "STATUS_IDLE",
    "STATUS_RECORDING",
    "STATUS_STOPPED",
    "STATUS_ERROR",
    "Command",
    "parse_command",
    "Topics",
    "encode_samples",
    "decode_samples",
    "build_chunk_message",
    "build_aggregate_message",
    "ChunkMessage",
    "AggregateMessage",
    "StatusEvent",
]
