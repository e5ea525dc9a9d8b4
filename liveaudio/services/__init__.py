"""Services layer for liveaudio recording logic."""

from .recording_session import RecordingSession
from .recorder import LiveAudioRecorder

__all__ = [
    "RecordingSession",
    "LiveAudioRecorder"
]
