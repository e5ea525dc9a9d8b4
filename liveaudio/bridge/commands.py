"""Inbound host bridge: maps start/stop/clear commands onto a recording session."""

import logging
from typing import Union

from pubsub import pub

from .protocol import Command, Topics, parse_command

logger = logging.getLogger(__name__)


class CommandListener:
    """Subscribes to the command topic and drives a session's transitions."""

    def __init__(self, session, topics: Topics):
        """Initialize and subscribe.

        Args:
            session: Object exposing start(), stop() and clear()
            topics: Topic names for this recorder
        """
        self.session = session
        self.topics = topics
        # pubsub holds weak references, keep the bound method alive here
        self._listener = self.on_command
        pub.subscribe(self._listener, topics.command)
        logger.info(f"CommandListener subscribed to: {topics.command}")

    def on_command(self, message) -> None:
        """Handle one command message."""
        try:
            parsed = parse_command(message)
        except ValueError:
            logger.warning(f"Ignoring unknown command: {message!r}")
            return

        logger.debug(f"Received command: {parsed.value}")
        if parsed is Command.START:
            self.session.start()
        elif parsed is Command.STOP:
            self.session.stop()
        elif parsed is Command.CLEAR:
            self.session.clear()

    def close(self) -> None:
        if pub.isSubscribed(self._listener, self.topics.command):
            pub.unsubscribe(self._listener, self.topics.command)


def send_command(topic_root: str, command: Union[Command, str]) -> None:
    """Publish a control command to the recorder listening on ``topic_root``."""
    parsed = parse_command(command)
    pub.sendMessage(Topics(topic_root).command, message=parsed.value)
