"""Recording session state machine: capture lifecycle, chunk emission and aggregate finalization."""

import time
import logging
import threading
from typing import Any, Callable, List, Optional

from ..audio.base import AbstractAudioSource, AudioSourceError
from ..audio.chunker import SampleChunker
from ..bridge.protocol import STATUS_ERROR, STATUS_IDLE, STATUS_RECORDING, STATUS_STOPPED
from ..config import RecorderConfig
from ..models.audio import AudioChunk, AudioStats
from ..models.session import SessionState

logger = logging.getLogger(__name__)


class _Capture:
    """State owned by one start->stop cycle."""

    def __init__(self, chunker: SampleChunker):
        self.chunker = chunker
        self.chunks: List[AudioChunk] = []
        self.handle: Any = None


class RecordingSession:
    """Owns the IDLE -> RECORDING -> STOPPED lifecycle of one recorder.

    Sample blocks arrive on the audio source's capture thread and are fed to
    a per-session chunker. Every completed chunk is appended to the session's
    chunk list and, when streaming is enabled, published on the bridge. On
    stop the capture is disconnected first, then the aggregate is built from
    the emitted chunks only.
    """

    def __init__(self, config: RecorderConfig, source: AbstractAudioSource, bridge,
                 clock: Callable[[], float] = time.time):
        """Initialize an idle session.

        Args:
            config: Validated recorder settings, fixed for the session's lifetime
            source: Audio source to open on start
            bridge: HostBridge used for chunk, aggregate and status messages
            clock: Wall clock for chunk timestamps and recording duration
        """
        self.config = config
        self.source = source
        self.bridge = bridge
        self.clock = clock

        self.state = SessionState.IDLE
        self.chunks: List[AudioChunk] = []
        self.aggregate: Optional[bytes] = None
        self.start_time: Optional[float] = None
        self.duration_seconds = 0.0

        self._active: Optional[_Capture] = None
        self._last_capture: Optional[_Capture] = None

        # Guards the active capture and its chunk list against the capture thread
        self._lock = threading.Lock()
        # Serializes start/stop/clear
        self._control_lock = threading.Lock()

        logger.info(f"RecordingSession initialized: {config.sample_rate}Hz, "
                    f"{config.chunk_size_in_samples} samples/chunk, "
                    f"streaming={'on' if config.streaming_enabled else 'off'}")

    @property
    def is_recording(self) -> bool:
        return self.state is SessionState.RECORDING

    def start(self) -> bool:
        """Open the audio source and begin a fresh capture.

        A start while already recording, or while another start is still
        acquiring the source, is ignored. Source failures are published as an
        error status and leave the session in its previous state.

        Returns:
            True if the session is recording when this returns
        """
        if not self._control_lock.acquire(blocking=False):
            logger.debug("Start already in progress, ignoring")
            return False

        try:
            if self.state is SessionState.RECORDING:
                logger.debug("Recording already in progress")
                return True

            capture = _Capture(SampleChunker(
                self.config.chunk_size_in_samples,
                sample_rate=self.config.sample_rate,
                clock=self.clock,
            ))
            with self._lock:
                self._active = capture

            start_time = self.clock()
            opened = False
            try:
                capture.handle = self.source.open(
                    self.config.sample_rate, 1,
                    lambda block: self._on_samples(capture, block),
                    on_error=lambda error: self._on_capture_error(capture, error),
                )
                opened = True
            except (AudioSourceError, OSError) as e:
                logger.error(f"Could not start recording: {e}")
                self.bridge.publish_status(STATUS_ERROR, str(e), error=e)
                return False
            finally:
                if not opened:
                    with self._lock:
                        self._active = None

            # The last finalized aggregate stays readable until the next stop or clear
            self.chunks = capture.chunks
            self.start_time = start_time
            self.duration_seconds = 0.0
            self._last_capture = None
            self.state = SessionState.RECORDING

            logger.info("Recording started")
            self.bridge.publish_status(STATUS_RECORDING)
            return True
        finally:
            self._control_lock.release()

    def _on_samples(self, capture: _Capture, block) -> None:
        """Capture-thread entry point: feed one block and dispatch completed chunks."""
        with self._lock:
            if capture is not self._active:
                # Late block from a capture that has been stopped
                return
            for chunk in capture.chunker.feed(block):
                capture.chunks.append(chunk)
                if self.config.streaming_enabled:
                    self.bridge.publish_chunk(chunk)

    def _on_capture_error(self, capture: _Capture, error: Exception) -> None:
        """Capture-thread entry point: the source stopped delivering samples."""
        with self._lock:
            if capture is not self._active:
                return
        logger.error(f"Capture failed while recording: {error}")
        self.bridge.publish_status(STATUS_ERROR, str(error), error=error)

    def stop(self) -> bool:
        """Disconnect the source and finalize the aggregate.

        Returns:
            True if a recording was stopped, False if not recording
        """
        with self._control_lock:
            if self.state is not SessionState.RECORDING:
                logger.debug("No recording in progress")
                return False

            capture = self._active
            try:
                self.source.close(capture.handle)
            except OSError as e:
                logger.error(f"Error closing audio source: {e}")

            # No feed can run past this point
            with self._lock:
                self._active = None

            residue = capture.chunker.drain()
            parts = [chunk.payload for chunk in capture.chunks]
            if residue.size and self.config.flush_on_stop:
                parts.append(residue.tobytes())
                logger.info(f"Flushed {residue.size} residual samples into the aggregate")
            elif residue.size:
                logger.debug(f"Discarded {residue.size} residual samples below one chunk")

            self.aggregate = b''.join(parts)
            self.duration_seconds = self.clock() - self.start_time
            self._last_capture = capture
            self.state = SessionState.STOPPED

            logger.info(f"Recording stopped. {len(capture.chunks)} chunks, "
                        f"{len(self.aggregate)} bytes, {self.duration_seconds:.2f}s")

            self.bridge.publish_aggregate(
                self.aggregate,
                sample_rate=self.config.sample_rate,
                duration_seconds=self.duration_seconds,
                chunk_count=len(capture.chunks),
            )
            self.bridge.publish_status(STATUS_STOPPED)
            return True

    def clear(self) -> bool:
        """Discard the chunk list and aggregate, returning to IDLE.

        Ignored while recording.

        Returns:
            True if anything was cleared
        """
        with self._control_lock:
            if self.state is SessionState.RECORDING:
                logger.warning("Cannot clear while recording, stop first")
                return False

            if self.state is SessionState.IDLE and not self.chunks and self.aggregate is None:
                return False

            self.chunks = []
            self.aggregate = None
            self.start_time = None
            self.duration_seconds = 0.0
            self._last_capture = None
            self.state = SessionState.IDLE

            logger.info("Session cleared")
            self.bridge.publish_status(STATUS_IDLE)
            return True

    def read(self) -> Optional[bytes]:
        """Most recently finalized aggregate, or None."""
        return self.aggregate

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        with self._lock:
            capture = self._active or self._last_capture
            total_chunks = len(capture.chunks) if capture else 0
            total_samples = capture.chunker.samples_fed if capture else 0
            pending_samples = capture.chunker.pending_samples if capture else 0
            peak_level = capture.chunker.peak_level if capture else 0.0

        duration = self.duration_seconds
        if self.is_recording and self.start_time is not None:
            duration = self.clock() - self.start_time

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.config.sample_rate,
            chunk_size=self.config.chunk_size_in_samples,
            total_chunks=total_chunks,
            total_samples=total_samples,
            pending_samples=pending_samples,
            peak_level=peak_level,
        )
