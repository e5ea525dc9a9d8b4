"""liveaudio - live microphone capture with fixed-size chunk streaming."""

__version__ = "0.1.0"
