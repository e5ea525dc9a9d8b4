"""LiveAudioRecorder: the public recorder API wiring source, session and host bridge together."""

import itertools
import logging
from typing import Any, Callable, List, Optional

from pubsub import pub

from ..audio.base import AbstractAudioSource
from ..bridge.commands import CommandListener
from ..bridge.protocol import DEFAULT_TOPIC_ROOT, Topics
from ..bridge.publisher import HostBridge
from ..config import ConfigurationError, RecorderConfig
from ..models.audio import AudioStats
from ..models.events import AggregateMessage, StatusEvent
from ..models.session import SessionState
from .recording_session import RecordingSession

logger = logging.getLogger(__name__)

_recorder_ids = itertools.count(1)


class LiveAudioRecorder:
    """Records from a live input and streams fixed-size pcm_f32le chunks.

    Example:
        recorder = LiveAudioRecorder(sample_rate=16000, chunk_size=30, chunk_unit="ms")
        recorder.listen(lambda payload: print(len(payload)))
        recorder.start_recording()
        ...
        recorder.stop_recording()
        audio = recorder.read()
    """

    def __init__(self, config: Optional[RecorderConfig] = None,
                 source: Optional[AbstractAudioSource] = None,
                 topic_root: Optional[str] = None, **options: Any):
        """Initialize the recorder.

        Args:
            config: Recorder settings; built from ``options`` when omitted
            source: Audio source, defaults to the system microphone via PyAudio
            topic_root: Pub/sub topic root, unique per recorder by default
            **options: sample_rate, chunk_size, chunk_unit, flush_on_stop

        Raises:
            ConfigurationError: If the settings are invalid
        """
        if config is None:
            config = RecorderConfig.from_dict(options)
        elif options:
            raise ConfigurationError(
                f"pass either a RecorderConfig or keyword options, not both: {sorted(options)}")

        if source is None:
            from ..audio.capture import PyAudioSource
            source = PyAudioSource()

        self.config = config
        self.source = source
        self.topics = Topics(topic_root or f"{DEFAULT_TOPIC_ROOT}.recorder{next(_recorder_ids)}")
        self.bridge = HostBridge(self.topics)
        self.session = RecordingSession(config, source, self.bridge)
        self.command_listener = CommandListener(self.session, self.topics)

        # pubsub only keeps weak references to listeners
        self._subscriptions: List[tuple] = []
        self._closed = False

        logger.info(f"LiveAudioRecorder ready on topic root: {self.topics.root}")

    @property
    def state(self) -> SessionState:
        return self.session.state

    def read(self) -> Optional[bytes]:
        """Return the last finalized recording as pcm_f32le bytes, or None."""
        return self.session.read()

    def start_recording(self) -> bool:
        return self.session.start()

    def stop_recording(self) -> bool:
        return self.session.stop()

    def clear(self) -> bool:
        return self.session.clear()

    def get_recording_stats(self) -> AudioStats:
        return self.session.get_recording_stats()

    def listen(self, callback: Callable[[bytes], None]) -> Callable[[], None]:
        """Call ``callback`` with each streamed chunk's payload.

        Returns:
            A function that removes the listener
        """
        def on_chunk(message):
            callback(message.payload)

        return self._subscribe(on_chunk, self.topics.chunk)

    def on_aggregate(self, callback: Callable[[AggregateMessage], None]) -> Callable[[], None]:
        return self._subscribe(callback, self.topics.aggregate)

    def on_status(self, callback: Callable[[StatusEvent], None]) -> Callable[[], None]:
        return self._subscribe(callback, self.topics.status)

    def _subscribe(self, callback: Callable, topic: str) -> Callable[[], None]:
        def listener(message):
            callback(message)

        entry = (listener, topic)
        pub.subscribe(listener, topic)
        self._subscriptions.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscriptions:
                self._subscriptions.remove(entry)
                pub.unsubscribe(listener, topic)

        return unsubscribe

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued message has reached the listeners."""
        return self.bridge.flush(timeout)

    def shutdown(self) -> None:
        """Stop any recording, deliver pending messages and detach listeners."""
        if self._closed:
            return
        self._closed = True

        self.session.stop()
        self.command_listener.close()
        self.bridge.shutdown()
        for listener, topic in self._subscriptions:
            pub.unsubscribe(listener, topic)
        self._subscriptions.clear()
        logger.info("LiveAudioRecorder shut down")

    def __enter__(self) -> "LiveAudioRecorder":
        return self

    def __exit__(self, *args) -> None:
        self.shutdown()
