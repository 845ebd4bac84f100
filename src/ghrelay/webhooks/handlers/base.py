from abc import ABC, abstractmethod
from typing import Any


class EventHandler(ABC):
    """
    Abstract base class for Slack Events API handlers.

    Each implementation returns a short outcome string that is sent back to
    Slack as the response body.
    """

    @abstractmethod
    async def handle(self, event: dict[str, Any]) -> str:
        """
        Process the inner event of an `event_callback` envelope.

        Args:
            event: The decoded inner event.

        Returns:
            "ok", or "ignored: <reason>".
        """
        pass
