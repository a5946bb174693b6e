"""Base notifier interface for RateWatch."""

from abc import ABC, abstractmethod
from typing import Any


class BaseNotifier(ABC):
    """Abstract base class for notification channels.

    Delivery is best-effort: ``send`` only reports whether the channel
    accepted the message, never whether the user saw it.
    """

    name: str = "notifier"

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether this channel can currently deliver.

        Returns:
            True if permission is granted and the channel exists.
        """
        pass

    def request_permission(self) -> bool:
        """Ask for permission to deliver notifications.

        Channels that need no permission simply report availability.

        Returns:
            True if the channel can deliver afterwards.
        """
        return self.is_available()

    @abstractmethod
    def send(self, title: str, body: str, payload: dict[str, Any]) -> bool:
        """Deliver a notification.

        Args:
            title: Short title.
            body: Human-readable message.
            payload: Structured data describing the event.

        Returns:
            True if the channel accepted the message, False if it was
            unavailable.
        """
        pass
