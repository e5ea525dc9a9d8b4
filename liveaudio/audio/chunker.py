"""Sample buffer that slices a variable-rate sample stream into fixed-size chunks."""

import time
import logging
from typing import Callable, List, Sequence, Union

import numpy as np

from ..models.audio import AudioChunk, BYTES_PER_SAMPLE, SAMPLE_DTYPE

logger = logging.getLogger(__name__)

SampleBlock = Union[np.ndarray, Sequence[float]]


class SampleChunker:
    """FIFO buffer that emits chunks of exactly ``chunk_size_in_samples`` samples.

    Samples are kept as little-endian float32 bytes so that each emitted
    chunk's payload is already in wire format. Not thread-safe: one chunker
    belongs to exactly one capture context.
    """

    def __init__(self, chunk_size_in_samples: int, sample_rate: int = 48000,
                 clock: Callable[[], float] = time.time):
        """Initialize the chunker.

        Args:
            chunk_size_in_samples: Exact length of every emitted chunk
            sample_rate: Sample rate stamped on emitted chunks
            clock: Wall clock used for chunk timestamps
        """
        if chunk_size_in_samples <= 0:
            raise ValueError(f"chunk_size_in_samples must be positive, got {chunk_size_in_samples}")

        self.chunk_size_in_samples = chunk_size_in_samples
        self.sample_rate = sample_rate
        self.clock = clock
        self.chunk_bytes = chunk_size_in_samples * BYTES_PER_SAMPLE

        self.buffer = bytearray()
        self.chunks_emitted = 0
        self.samples_fed = 0
        self.peak_level = 0.0

    @property
    def pending_samples(self) -> int:
        """Samples buffered below one full chunk."""
        return len(self.buffer) // BYTES_PER_SAMPLE

    def feed(self, block: SampleBlock) -> List[AudioChunk]:
        """Append a block of samples and cut off every completed chunk.

        Args:
            block: Float samples in arrival order, any length

        Returns:
            Chunks completed by this block, oldest first (possibly empty)
        """
        samples = np.asarray(block, dtype=SAMPLE_DTYPE).reshape(-1)
        if samples.size == 0:
            return []

        self.buffer.extend(samples.tobytes())
        self.samples_fed += samples.size
        block_peak = float(np.max(np.abs(samples)))
        if block_peak > self.peak_level:
            self.peak_level = block_peak

        chunks = []
        while len(self.buffer) >= self.chunk_bytes:
            payload = bytes(self.buffer[:self.chunk_bytes])
            del self.buffer[:self.chunk_bytes]
            chunks.append(AudioChunk(
                payload=payload,
                sequence_number=self.chunks_emitted,
                timestamp=self.clock(),
                sample_rate=self.sample_rate,
            ))
            self.chunks_emitted += 1

        if chunks:
            logger.debug(f"Emitted {len(chunks)} chunk(s), "
                         f"{self.pending_samples} samples pending")
        return chunks

    def drain(self) -> np.ndarray:
        """Return and clear the partial residue below one chunk."""
        residue = np.frombuffer(bytes(self.buffer), dtype=SAMPLE_DTYPE)
        self.buffer.clear()
        return residue
