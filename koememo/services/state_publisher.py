"""Publishes memo state changes using pubsub.pub."""

import logging
from typing import Optional
from pubsub import pub

from ..models.session import MemoTexts, ProcessingState

logger = logging.getLogger(__name__)

STATE_TOPIC = "memo.state"


class StatePublisher:
    """Publishes ProcessingState transitions for UI listeners."""

    def __init__(self, topic: str = STATE_TOPIC):
        """Initialize state publisher.

        Args:
            topic: Pub/sub topic name for state events
        """
        self.topic = topic
        logger.info(f"StatePublisher initialized with topic: {topic}")

    def publish_state(self, state: ProcessingState, texts: MemoTexts,
                      error: Optional[str] = None) -> None:
        """Publish a state change to the pub/sub topic.

        Listeners receive keyword arguments ``state``, ``texts`` and ``error``.
        """
        pub.sendMessage(self.topic, state=state, texts=texts, error=error)
        logger.debug(f"Published state: {state.value}")
