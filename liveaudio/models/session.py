"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SessionState(Enum):
    """Lifecycle state of a recording session."""
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"


@dataclass
class SessionInfo:
    """Information about a saved recording session."""
    session_id: str
    start_time: datetime
    duration_seconds: float
    audio_file: str
    file_size_bytes: int
    sample_rate: int
    total_chunks: int
    sample_count: int
