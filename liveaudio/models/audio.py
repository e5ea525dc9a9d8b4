"""Audio-related data models."""

from dataclasses import dataclass

import numpy as np

BYTES_PER_SAMPLE = 4  # 32-bit float
SAMPLE_DTYPE = np.dtype('<f4')


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    total_samples: int
    pending_samples: int
    peak_level: float


@dataclass(frozen=True)
class AudioChunk:
    """A fixed-size slice of mono float samples, immutable once emitted."""
    payload: bytes  # little-endian float32 samples
    sequence_number: int
    timestamp: float  # Unix timestamp when the chunk was completed
    sample_rate: int
    channels: int = 1

    @property
    def sample_count(self) -> int:
        return len(self.payload) // BYTES_PER_SAMPLE

    @property
    def byte_size(self) -> int:
        return len(self.payload)

    @property
    def samples(self) -> np.ndarray:
        """Read-only float32 view over the payload (no copy)."""
        return np.frombuffer(self.payload, dtype=SAMPLE_DTYPE)

    @property
    def duration_ms(self) -> float:
        return self.sample_count * 1000.0 / self.sample_rate
