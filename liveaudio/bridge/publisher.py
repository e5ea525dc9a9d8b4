"""Outbound host bridge: non-blocking pub/sub delivery of chunk, aggregate and status messages."""

import logging
import queue
import threading
from typing import Any, Optional, Tuple

from pubsub import pub

from ..models.audio import AudioChunk
from ..models.events import StatusEvent
from .protocol import Topics, build_aggregate_message, build_chunk_message

logger = logging.getLogger(__name__)

_SENTINEL = None


class HostBridge:
    """Publishes recorder messages with pubsub.pub from a dedicated delivery thread.

    ``publish_*`` only enqueue, so the capture path never waits on listeners.
    Delivery is at-most-once: a listener that raises loses that message.
    """

    def __init__(self, topics: Topics):
        """Initialize the bridge and start its delivery thread.

        Args:
            topics: Topic names for this recorder
        """
        self.topics = topics
        self.delivery_queue: "queue.Queue[Optional[Tuple[str, Any]]]" = queue.Queue()
        self.messages_delivered = 0
        self.delivery_failures = 0
        self._closed = False

        self.delivery_thread = threading.Thread(target=self._delivery_loop, daemon=True)
        self.delivery_thread.name = f"HostBridge_{topics.root}"
        self.delivery_thread.start()
        logger.info(f"HostBridge initialized with topic root: {topics.root}")

    def publish_chunk(self, chunk: AudioChunk) -> None:
        self._enqueue(self.topics.chunk, build_chunk_message(chunk))

    def publish_aggregate(self, payload: bytes, sample_rate: int, duration_seconds: float,
                          chunk_count: int) -> None:
        message = build_aggregate_message(payload, sample_rate, duration_seconds, chunk_count)
        self._enqueue(self.topics.aggregate, message)

    def publish_status(self, status: str, message: str = "",
                       error: Optional[BaseException] = None) -> None:
        self._enqueue(self.topics.status, StatusEvent(status=status, message=message, error=error))

    def _enqueue(self, topic: str, message: Any) -> None:
        if self._closed:
            logger.debug(f"Bridge closed, dropping message for {topic}")
            return
        self.delivery_queue.put((topic, message))

    def _delivery_loop(self) -> None:
        """Drain the queue in FIFO order until the sentinel arrives."""
        while True:
            item = self.delivery_queue.get()
            try:
                if item is _SENTINEL:
                    logger.debug("Delivery thread received sentinel, exiting")
                    break
                topic, message = item
                try:
                    pub.sendMessage(topic, message=message)
                    self.messages_delivered += 1
                except Exception as e:
                    self.delivery_failures += 1
                    logger.error(f"Delivery to {topic} failed, message dropped: {e}", exc_info=True)
            finally:
                self.delivery_queue.task_done()

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued message has been delivered.

        Returns:
            True if the queue drained within the timeout
        """
        if timeout is None:
            self.delivery_queue.join()
            return True

        waiter = threading.Thread(target=self.delivery_queue.join, daemon=True)
        waiter.name = f"HostBridgeFlush_{self.topics.root}"
        waiter.start()
        waiter.join(timeout=timeout)
        return not waiter.is_alive()

    def shutdown(self, timeout: float = 2.0) -> None:
        """Deliver what is queued, then stop the delivery thread."""
        if self._closed:
            return
        self._closed = True
        self.delivery_queue.put(_SENTINEL)
        self.delivery_thread.join(timeout=timeout)
        if self.delivery_thread.is_alive():
            logger.warning("Delivery thread did not stop cleanly")
        logger.info(f"HostBridge shut down. Delivered {self.messages_delivered} messages, "
                    f"{self.delivery_failures} failures")
