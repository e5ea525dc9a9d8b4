"""Host bridge message contract and pub/sub transport."""

from .protocol import (
    PCM_FORMAT,
    Command,
    Topics,
    parse_command,
    encode_samples,
    decode_samples,
)
from .publisher import HostBridge
from .commands import CommandListener, send_command

__all__ = [
    "PCM_FORMAT",
    "Command",
    "Topics",
    "parse_command",
    "encode_samples",
    "decode_samples",
    "HostBridge",
    "CommandListener",
    "send_command",
]
