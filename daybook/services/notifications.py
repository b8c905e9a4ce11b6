"""
User-Visible Notifications

The core never raises to its caller on reload. When something the user
should know about happens (journal folder missing, stale data served),
it is pushed through a Notifier instead.
"""

from abc import ABC, abstractmethod

import structlog


class Notifier(ABC):
    """Non-blocking, user-visible message sink."""

    @abstractmethod
    def notify(self, message: str) -> None:
        pass


class LoggingNotifier(Notifier):
    """Default notifier: writes notifications to the log."""

    def __init__(self):
        self._logger = structlog.get_logger("daybook.notifications")

    def notify(self, message: str) -> None:
        self._logger.warning("user_notification", message=message)


class CollectingNotifier(Notifier):
    """Keeps every message, for hosts that render them later."""

    def __init__(self):
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)
