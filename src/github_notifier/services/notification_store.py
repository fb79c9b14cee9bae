"""In-memory cache of the current unread notification set."""

import logging

from github_notifier.types import NotificationItem

logger = logging.getLogger(__name__)


class NotificationStore:
    """Ordered, duplicate-free list of unread notifications.

    Owned by the poll scheduler and the action dispatcher. Every operation
    runs to completion without yielding to the event loop.
    """

    def __init__(self):
        self._items: list[NotificationItem] = []
        self._previous_count = 0

    @property
    def previous_count(self) -> int:
        """Count before the most recent replace_all()."""
        return self._previous_count

    def replace_all(self, items: list[NotificationItem]) -> int:
        """Swap in a fresh fetch result and return the new count."""
        seen: set[str] = set()
        fresh: list[NotificationItem] = []
        for item in items:
            if item.id in seen:
                logger.debug("Dropping duplicate thread %s", item.id)
                continue
            seen.add(item.id)
            fresh.append(item)

        self._previous_count = len(self._items)
        self._items = fresh
        return len(self._items)

    def remove_by_id(self, thread_id: str) -> int:
        self._items = [n for n in self._items if n.id != thread_id]
        return len(self._items)

    def clear(self) -> int:
        self._items = []
        return 0

    def current_count(self) -> int:
        return len(self._items)

    def items(self) -> tuple[NotificationItem, ...]:
        return tuple(self._items)

    def get(self, thread_id: str) -> NotificationItem | None:
        for item in self._items:
            if item.id == thread_id:
                return item
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, thread_id: str) -> bool:
        return self.get(thread_id) is not None
