import logging
from typing import List

logger = logging.getLogger(__name__)


class Alerts:
    """User-facing alert channel. Messages are logged and kept for display."""

    def __init__(self):
        self.messages: List[str] = []

    def alert(self, message: str):
        logger.warning(message)
        self.messages.append(message)

    def clear(self) -> List[str]:
        """Return pending messages and forget them."""
        messages, self.messages = self.messages, []
        return messages
