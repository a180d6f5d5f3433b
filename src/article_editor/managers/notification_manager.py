# src/article_editor/managers/notification_manager.py
import logging
from typing import Callable, List, Optional

from article_editor.model import Notification

logger = logging.getLogger(__name__)


class NotificationManager:
    """
    Collects the transient toasts the editor shows to the user.
    An optional listener receives every notification as it is raised.
    """

    def __init__(self, listener: Optional[Callable[[Notification], None]] = None, limit: int = 50):
        self._items: List[Notification] = []
        self._listener = listener
        self._limit = limit

    def notify(self, title: str, description: Optional[str] = None, variant: str = "default") -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        self._items.append(notification)
        del self._items[:-self._limit]

        if notification.is_error:
            logger.warning("Notification: %s%s", title, f" ({description})" if description else "")
        else:
            logger.info("Notification: %s", title)

        if self._listener:
            self._listener(notification)
        return notification

    def success(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify(title, description)

    def error(self, title: str, description: Optional[str] = None) -> Notification:
        return self.notify(title, description, variant="destructive")

    @property
    def items(self) -> List[Notification]:
        return list(self._items)

    @property
    def last(self) -> Optional[Notification]:
        return self._items[-1] if self._items else None

    def drain(self) -> List[Notification]:
        """Returns and clears all pending notifications."""
        items, self._items = self._items, []
        return items
