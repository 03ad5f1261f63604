"""User-facing notifications (toasts) raised by the sync engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    """A toast for the UI layer."""
    title: str
    description: str
    level: NotificationLevel = NotificationLevel.INFO


FEATURE_DISABLED = Notification(
    title="Save Feature Disabled",
    description=(
        "We've encountered multiple errors with the save feature. It has been "
        "temporarily disabled. Changes are kept on this device only."
    ),
    level=NotificationLevel.DESTRUCTIVE,
)

OFFLINE_DATA = Notification(
    title="Using offline data",
    description=(
        "We're showing your saved campaigns from your device since the server "
        "couldn't be reached."
    ),
    level=NotificationLevel.INFO,
)


class NotificationSink(ABC):
    """Receives notifications for display."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Deliver one notification."""


class LoggingNotificationSink(NotificationSink):
    """Writes notifications to the log; the default when no UI is attached."""

    def notify(self, notification: Notification) -> None:
        log = logger.warning if notification.level is NotificationLevel.DESTRUCTIVE else logger.info
        log(
            "User notification",
            title=notification.title,
            description=notification.description,
            level=notification.level.value
        )


class RecordingNotificationSink(NotificationSink):
    """Collects notifications for a UI to drain."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def drain(self) -> list[Notification]:
        """Return and forget everything collected so far."""
        drained, self.notifications = self.notifications, []
        return drained
