"""Polling loop: timed fetches, back-off, and reconciliation into the store.

State machine
-------------
    IDLE ──enable──▶ FETCHING ──result──▶ WAITING ──timer──▶ FETCHING ...
                        ▲                    │
                        └────refresh_now─────┘

* Exactly one QTimer exists and it is only armed in WAITING.
* A list request is only started from IDLE or WAITING, never from
  FETCHING, so at most one fetch is logically in flight.
* Every request captures the current generation. disable() and
  credential changes bump the generation, so any response still on its
  way is dropped on arrival without touching the store or the timer.
"""

import logging
from enum import Enum

from PySide6.QtCore import QObject, Signal, Slot, QTimer

from github_notifier.types import ConfigSnapshot
from github_notifier.services import api_client
from github_notifier.services.api_client import ApiError, ListResult, Unauthorized
from github_notifier.services.config_manager import REQUEST_KEYS, SCHEDULE_KEYS
from github_notifier.services.notification_store import NotificationStore
from github_notifier.utils.backoff import DEFAULT_SERVER_INTERVAL, next_delay

logger = logging.getLogger(__name__)

# Lets a burst of settings writes coalesce into one re-fetch
SETTLE_DELAY_S = 5


class PollState(str, Enum):
    IDLE = "idle"
    WAITING = "waiting"
    FETCHING = "fetching"


class PollScheduler(QObject):
    """Owns the poll cycle and the notification store's fetch-driven updates."""

    state_changed = Signal(str)
    enabled_changed = Signal(bool)
    notifications_changed = Signal(int)   # count
    alert_raised = Signal(int)            # count, only when it went up
    auth_error_changed = Signal(bool)
    fetch_failed = Signal(str)

    def __init__(
        self,
        config,
        transport,
        store: NotificationStore,
        parent=None,
    ):
        super().__init__(parent)
        self._config = config
        self._transport = transport
        self._store = store

        self._state = PollState.IDLE
        self._enabled = False
        self._generation = 0
        self._retry_attempts = 0
        self._server_interval = DEFAULT_SERVER_INTERVAL
        self._auth_error = False
        self._last_delay: int | None = None

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timer)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def retry_attempts(self) -> int:
        return self._retry_attempts

    @property
    def server_interval(self) -> int:
        return self._server_interval

    @property
    def auth_error(self) -> bool:
        return self._auth_error

    @property
    def last_delay(self) -> int | None:
        """Seconds the timer was last armed for."""
        return self._last_delay

    def timer_active(self) -> bool:
        return self._timer.isActive()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @Slot()
    def enable(self):
        """Reset poll state and fetch immediately."""
        if self._enabled:
            return
        self._enabled = True
        self._generation += 1
        self._retry_attempts = 0
        self._server_interval = DEFAULT_SERVER_INTERVAL
        self._last_delay = None
        self._set_auth_error(False)
        self.enabled_changed.emit(True)
        self._fetch()

    @Slot()
    def disable(self):
        """Stop polling. A response still in flight will be ignored."""
        if not self._enabled:
            return
        self._timer.stop()
        self._enabled = False
        self._generation += 1
        self._set_state(PollState.IDLE)
        self.enabled_changed.emit(False)
        logger.debug("Polling disabled (generation %d)", self._generation)

    @Slot()
    def refresh_now(self):
        """Fetch right away unless a fetch is already running."""
        if not self._enabled:
            return
        if self._state == PollState.FETCHING:
            logger.debug("Refresh requested while fetching, ignored")
            return
        self._fetch()

    @Slot(str)
    def on_settings_changed(self, key: str):
        """React to a preference write."""
        if not self._enabled:
            return
        if key in REQUEST_KEYS:
            # The request in flight (if any) used stale credentials or filters
            self._generation += 1
            self._retry_attempts = 0
            self._arm(SETTLE_DELAY_S)
            logger.info("%s changed, re-fetching in %ds", key, SETTLE_DELAY_S)
        elif key in SCHEDULE_KEYS and self._state == PollState.WAITING:
            self._retry_attempts = 0
            self._arm(SETTLE_DELAY_S)

    # ------------------------------------------------------------------
    # Fetch cycle
    # ------------------------------------------------------------------

    def _on_timer(self):
        if not self._enabled:
            return
        self._fetch()

    def _fetch(self):
        self._timer.stop()
        self._set_state(PollState.FETCHING)
        config = self._config.snapshot()

        if not config.token:
            logger.debug("No token configured, skipping fetch")
            self._schedule_next(config, failed=False)
            return

        generation = self._generation
        request = api_client.build_list_request(config)
        self._transport.request(
            request, lambda outcome: self._on_list_response(generation, outcome)
        )

    def _on_list_response(self, generation: int, outcome):
        if generation != self._generation or not self._enabled:
            logger.debug("Discarding stale list response (generation %d)", generation)
            return

        config = self._config.snapshot()
        failed = True
        try:
            result = api_client.interpret_list(outcome)
            self._apply(result, config)
            failed = False
        except Unauthorized as e:
            logger.error("Notification fetch failed: %s", e)
            self._set_auth_error(True)
            self.fetch_failed.emit(str(e))
        except ApiError as e:
            logger.warning("Notification fetch failed: %s", e)
            self.fetch_failed.emit(str(e))
        finally:
            # Whatever happened above, the machine must leave FETCHING
            self._schedule_next(config, failed=failed)

    def _apply(self, result: ListResult, config: ConfigSnapshot):
        """Replace the store with the fetched set and raise an alert on growth."""
        if result.poll_interval is not None:
            self._server_interval = result.poll_interval
        count = self._store.replace_all(result.items)
        previous = self._store.previous_count
        self._set_auth_error(False)
        self.notifications_changed.emit(count)

        if count > previous and config.show_alert:
            self.alert_raised.emit(count)

    def _schedule_next(self, config: ConfigSnapshot, failed: bool):
        if failed:
            self._retry_attempts += 1
        else:
            self._retry_attempts = 0
        delay = next_delay(self._retry_attempts, self._server_interval, config.refresh_interval)
        self._arm(delay)

    def _arm(self, delay: int):
        self._timer.stop()
        self._last_delay = delay
        self._timer.start(delay * 1000)
        self._set_state(PollState.WAITING)
        logger.debug("Next fetch in %ds (retry %d)", delay, self._retry_attempts)

    def _set_state(self, state: PollState):
        if self._state != state:
            self._state = state
            self.state_changed.emit(state.value)

    def _set_auth_error(self, value: bool):
        if self._auth_error != value:
            self._auth_error = value
            self.auth_error_changed.emit(value)
