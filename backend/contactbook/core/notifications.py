"""
User-visible notifications (title + description), collected per request and logged.
"""

import logging
from dataclasses import dataclass
from typing import List, Literal, Optional

logger = logging.getLogger(__name__)

Variant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: Variant = "default"


class Notifier:
    def __init__(self) -> None:
        self.history: List[Notification] = []

    def notify(self, title: str, description: str, variant: Variant = "default") -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self.history.append(notification)
        if variant == "destructive":
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)
        return notification

    def error(self, title: str, description: str) -> Notification:
        return self.notify(title, description, variant="destructive")

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None


def get_notifier() -> Notifier:
    """Dependency for FastAPI: one notifier per request."""
    return Notifier()
