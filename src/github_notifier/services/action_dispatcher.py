"""User intents: refresh, mark read, open in browser, credential check."""

import logging
from typing import Callable

from PySide6.QtCore import QObject, Signal, Slot

from github_notifier.types import NotificationItem, SubjectType
from github_notifier.services import api_client
from github_notifier.services.api_client import ApiError
from github_notifier.services.notification_store import NotificationStore
from github_notifier.services.poll_scheduler import PollScheduler
from github_notifier.utils.url_resolver import html_url_for, inbox_url

logger = logging.getLogger(__name__)


class ActionDispatcher(QObject):
    """Turns consumer intents into API calls and store mutations.

    Mark-read results update the store as soon as they land, independent of
    the poll cycle. A poll response arriving afterwards may briefly bring a
    dismissed item back; the following poll corrects it.
    """

    notifications_changed = Signal(int)    # count
    action_failed = Signal(str)
    url_opened = Signal(str)
    connection_tested = Signal(bool, str)  # ok, message

    def __init__(
        self,
        config,
        transport,
        store: NotificationStore,
        scheduler: PollScheduler,
        launch_url: Callable[[str], None],
        parent=None,
    ):
        super().__init__(parent)
        self._config = config
        self._transport = transport
        self._store = store
        self._scheduler = scheduler
        self._launch_url = launch_url

        self._generation = 0
        self._pending_marks: set[str] = set()
        self._mark_all_pending = False

        scheduler.enabled_changed.connect(self._on_enabled_changed)

    @property
    def generation(self) -> int:
        return self._generation

    def _on_enabled_changed(self, enabled: bool):
        if not enabled:
            # Teardown: whatever is still in flight must not land
            self._generation += 1
            self._pending_marks.clear()
            self._mark_all_pending = False

    def _ready_config(self):
        if not self._scheduler.enabled:
            logger.debug("Action ignored, polling is disabled")
            return None
        config = self._config.snapshot()
        if not config.token:
            logger.debug("Action ignored, no token configured")
            return None
        return config

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    @Slot()
    def refresh(self):
        self._scheduler.refresh_now()

    @Slot(str)
    def mark_one_read(self, thread_id: str):
        """Dismiss a single thread."""
        config = self._ready_config()
        if config is None or not thread_id:
            return
        if thread_id in self._pending_marks or self._mark_all_pending:
            return

        self._pending_marks.add(thread_id)
        generation = self._generation
        self._transport.request(
            api_client.build_mark_one_request(config, thread_id),
            lambda outcome: self._on_mark_one(generation, thread_id, outcome),
        )

    @Slot()
    def mark_all_read(self):
        config = self._ready_config()
        if config is None or self._mark_all_pending:
            return

        self._mark_all_pending = True
        generation = self._generation
        self._transport.request(
            api_client.build_mark_all_request(config),
            lambda outcome: self._on_mark_all(generation, outcome),
        )

    @Slot(str)
    def open_notification(self, thread_id: str):
        """Open a notification's subject in the browser.

        Releases need an extra lookup because their API URL holds a numeric
        id that has no web page.
        """
        item = self._store.get(thread_id)
        if item is None:
            logger.debug("Open requested for unknown thread %s", thread_id)
            return
        config = self._config.snapshot()

        if (
            item.subject_type == SubjectType.RELEASE
            and item.subject_url
            and config.token
            and self._scheduler.enabled
            and api_client.is_api_url(item.subject_url, config)
        ):
            generation = self._generation
            self._transport.request(
                api_client.build_release_request(config, item.subject_url),
                lambda outcome: self._on_release(generation, item, outcome),
            )
            return

        self._launch(html_url_for(item, config))

    @Slot()
    def open_inbox(self):
        self._launch(inbox_url(self._config.snapshot()))

    @Slot()
    def test_connection(self):
        """Check the configured token against the API."""
        config = self._config.snapshot()
        if not config.token:
            self.connection_tested.emit(False, "No token set")
            return
        generation = self._generation
        self._transport.request(
            api_client.build_connection_test_request(config),
            lambda outcome: self._on_connection_test(generation, outcome),
        )

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def _on_mark_one(self, generation: int, thread_id: str, outcome):
        if generation != self._generation:
            logger.debug("Discarding stale mark-read response for %s", thread_id)
            return
        self._pending_marks.discard(thread_id)
        try:
            api_client.interpret_mutation(outcome)
        except ApiError as e:
            logger.error("Mark-thread-read failed for %s: %s", thread_id, e)
            self.action_failed.emit(f"Mark read failed: {e}")
            return
        count = self._store.remove_by_id(thread_id)
        self.notifications_changed.emit(count)

    def _on_mark_all(self, generation: int, outcome):
        if generation != self._generation:
            logger.debug("Discarding stale mark-all-read response")
            return
        self._mark_all_pending = False
        try:
            api_client.interpret_mutation(outcome)
        except ApiError as e:
            logger.error("Mark-all-read failed: %s", e)
            self.action_failed.emit(f"Mark all read failed: {e}")
            return
        count = self._store.clear()
        self.notifications_changed.emit(count)

    def _on_connection_test(self, generation: int, outcome):
        if generation != self._generation:
            logger.debug("Discarding stale connection test response")
            return
        self.connection_tested.emit(*api_client.interpret_connection_test(outcome))

    def _on_release(self, generation: int, item: NotificationItem, outcome):
        if generation != self._generation:
            return
        config = self._config.snapshot()
        try:
            url = api_client.interpret_release(outcome, config, item.repository)
        except ApiError as e:
            logger.warning("Failed to resolve release URL: %s", e)
            url = None
        self._launch(url or html_url_for(item, config))

    def _launch(self, url: str):
        try:
            self._launch_url(url)
        except Exception:
            logger.error("Cannot open URI %s", url, exc_info=True)
            return
        self.url_opened.emit(url)
