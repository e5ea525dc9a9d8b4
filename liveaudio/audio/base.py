"""Abstract audio source interface and capture errors."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import numpy as np


SampleCallback = Callable[[np.ndarray], None]
ErrorCallback = Callable[[Exception], None]


class AudioSourceError(Exception):
    """Raised when the audio source cannot be acquired."""


class PermissionDenied(AudioSourceError):
    """Access to the input device was refused."""


class DeviceUnavailable(AudioSourceError):
    """No usable input device could be opened."""


class AbstractAudioSource(ABC):
    """Abstract base class for live sample sources."""

    @abstractmethod
    def open(self, sample_rate: int, channels: int, on_samples: SampleCallback,
             on_error: Optional[ErrorCallback] = None) -> Any:
        """Open the device and start delivering sample blocks.

        Args:
            sample_rate: Requested sample rate in Hz
            channels: Requested channel count (always 1 for now)
            on_samples: Called from the capture context with each float32 block
            on_error: Called from the capture context if capture fails after opening

        Returns:
            An opaque handle to pass back to close()

        Raises:
            PermissionDenied: If access to the device is refused
            DeviceUnavailable: If the device cannot be opened
        """
        pass

    @abstractmethod
    def close(self, handle: Any) -> None:
        """Stop delivery and release the device.

        No callback may run once this returns.
        """
        pass
