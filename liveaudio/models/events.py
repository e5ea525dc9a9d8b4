"""Event models carried over the host bridge."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ChunkMessage:
    """One streamed chunk: metadata plus its pcm_f32le payload."""
    info: Dict[str, Any]
    payload: bytes


@dataclass
class AggregateMessage:
    """The finalized recording of one session."""
    info: Dict[str, Any]
    payload: bytes


@dataclass
class StatusEvent:
    """Session lifecycle event ("idle", "recording", "stopped", "error")."""
    status: str
    message: str = ""
    timestamp: float = field(default_factory=time.time)
    error: Optional[BaseException] = None
