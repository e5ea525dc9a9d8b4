"""PyAudio-backed audio source with a dedicated capture thread."""

import logging
from threading import Thread, Event
from typing import Optional

import numpy as np
import pyaudio

from .base import (
    AbstractAudioSource,
    DeviceUnavailable,
    ErrorCallback,
    PermissionDenied,
    SampleCallback,
)

logger = logging.getLogger(__name__)


class CaptureHandle:
    """Resources owned by one open capture stream."""

    def __init__(self, pyaudio_instance: pyaudio.PyAudio, stream, on_samples: SampleCallback,
                 on_error: Optional[ErrorCallback] = None):
        self.pyaudio_instance = pyaudio_instance
        self.stream = stream
        self.on_samples = on_samples
        self.on_error = on_error
        self.stop_event = Event()
        self.thread: Optional[Thread] = None
        self.total_blocks = 0


class PyAudioSource(AbstractAudioSource):
    """Reads float32 blocks from a PyAudio input stream on a background thread."""

    def __init__(self, frames_per_buffer: int = 1024, input_device_index: Optional[int] = None):
        """Initialize the source.

        Args:
            frames_per_buffer: Samples read from the device per block
            input_device_index: PyAudio device index, None for the default input
        """
        self.frames_per_buffer = frames_per_buffer
        self.input_device_index = input_device_index

    def open(self, sample_rate: int, channels: int, on_samples: SampleCallback,
             on_error: Optional[ErrorCallback] = None) -> CaptureHandle:
        pyaudio_instance = None
        try:
            pyaudio_instance = pyaudio.PyAudio()
            stream = pyaudio_instance.open(
                format=pyaudio.paFloat32,
                channels=channels,
                rate=sample_rate,
                input=True,
                frames_per_buffer=self.frames_per_buffer,
                input_device_index=self.input_device_index,
                stream_callback=None
            )
        except PermissionError as e:
            if pyaudio_instance:
                pyaudio_instance.terminate()
            raise PermissionDenied(f"Microphone access denied: {e}") from e
        except OSError as e:
            if pyaudio_instance:
                pyaudio_instance.terminate()
            raise DeviceUnavailable(f"Could not open input device: {e}") from e

        logger.info(f"Audio stream opened: {sample_rate}Hz, "
                    f"{self.frames_per_buffer} samples/block")

        handle = CaptureHandle(pyaudio_instance, stream, on_samples, on_error)
        handle.thread = Thread(target=self._record_continuously, args=(handle,), daemon=True)
        handle.thread.name = "AudioCaptureThread"
        handle.thread.start()
        return handle

    def _read_block(self, handle: CaptureHandle) -> np.ndarray:
        raw = handle.stream.read(self.frames_per_buffer, exception_on_overflow=False)
        handle.total_blocks += 1
        return np.frombuffer(raw, dtype=np.float32)

    def _record_continuously(self, handle: CaptureHandle) -> None:
        """Internal method: continuous read loop in background thread."""
        try:
            while not handle.stop_event.is_set():
                block = self._read_block(handle)
                if handle.stop_event.is_set():
                    break
                handle.on_samples(block)
        except OSError as e:
            logger.error(f"Audio stream read failed: {e}")
            if handle.on_error and not handle.stop_event.is_set():
                handle.on_error(DeviceUnavailable(f"Audio stream read failed: {e}"))

    def close(self, handle: CaptureHandle) -> None:
        handle.stop_event.set()

        if handle.thread and handle.thread.is_alive():
            handle.thread.join(timeout=2.0)
            if handle.thread.is_alive():
                logger.warning("Capture thread did not stop cleanly")

        try:
            handle.stream.stop_stream()
            handle.stream.close()
        finally:
            handle.pyaudio_instance.terminate()

        logger.info(f"Audio stream closed. Total blocks: {handle.total_blocks}")
