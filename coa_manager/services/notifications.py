"""Operator-facing notifications (toasts) for the chart of accounts."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    title: str
    description: str
    level: str = "info"  # info or error
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_error(self) -> bool:
        return self.level == "error"


class Notifier:
    """
    Collects notifications for the operator.

    Every notification is logged and kept in memory; an optional callback
    receives each one as it is pushed (the CLI prints them).
    """

    def __init__(self, callback: Optional[Callable[[Notification], None]] = None):
        self.callback = callback
        self.notifications: List[Notification] = []

    def notify(self, title: str, description: str, level: str = "info") -> Notification:
        notification = Notification(title=title, description=description, level=level)
        self.notifications.append(notification)

        if notification.is_error:
            logger.error(f"{title}: {description}")
        else:
            logger.info(f"{title}: {description}")

        if self.callback:
            self.callback(notification)
        return notification

    def success(self, title: str, description: str) -> Notification:
        return self.notify(title, description, level="info")

    def error(self, title: str, description: str) -> Notification:
        return self.notify(title, description, level="error")

    @property
    def latest(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def clear(self):
        self.notifications = []
