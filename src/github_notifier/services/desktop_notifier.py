"""Desktop side effects: D-Bus notification banners and browser launch."""

import asyncio
import logging
import threading

from PySide6.QtCore import QObject, Signal, Slot, QUrl
from PySide6.QtGui import QDesktopServices

logger = logging.getLogger(__name__)

APP_NAME = "GitHub Notifier"
ALERT_SUMMARY = "GitHub Notifications"
ALERT_ICON = "mail-unread-symbolic"
ALERT_TIMEOUT_MS = 5000

NOTIFY_BUS_NAME = "org.freedesktop.Notifications"
NOTIFY_OBJECT_PATH = "/org/freedesktop/Notifications"
DEFAULT_ACTION = "default"
# A banner that sits in the message tray can still be clicked later
LISTEN_TIMEOUT_S = 600


def alert_message(count: int) -> str:
    if count == 1:
        return "You have 1 unread notification"
    return f"You have {count} unread notifications"


def open_in_browser(url: str) -> None:
    """Hand a URL to the desktop's default handler."""
    if not QDesktopServices.openUrl(QUrl(url)):
        raise RuntimeError(f"no handler accepted {url}")


class DesktopNotifier(QObject):
    """Sends freedesktop.org notifications for new unread items.

    Each banner carries a default action. Clicking it emits ``activated``,
    which the application routes to the inbox. The D-Bus work runs on a
    daemon thread, so ``activated`` reaches GUI-thread slots queued.
    """

    activated = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._lock = threading.Lock()
        self._replaces_id = 0
        self._latest_alert = 0

    @Slot(int)
    def show_alert(self, count: int):
        self._send_dbus_notification(ALERT_SUMMARY, alert_message(count))

    def _send_dbus_notification(self, summary: str, body: str):
        """Send a desktop notification via D-Bus in a background thread."""

        def _notify():
            try:
                asyncio.run(self._notify_and_listen(summary, body))
            except Exception:
                logger.debug("D-Bus notification failed", exc_info=True)

        thread = threading.Thread(target=_notify, daemon=True)
        thread.start()

    async def _notify_and_listen(self, summary: str, body: str):
        """Show one banner and wait for it to be clicked or closed."""
        from dbus_next.aio import MessageBus

        bus = await MessageBus().connect()
        try:
            introspection = await bus.introspect(NOTIFY_BUS_NAME, NOTIFY_OBJECT_PATH)
            proxy = bus.get_proxy_object(NOTIFY_BUS_NAME, NOTIFY_OBJECT_PATH, introspection)
            iface = proxy.get_interface(NOTIFY_BUS_NAME)

            closed = asyncio.Event()
            sent = {}

            def on_action_invoked(notification_id, action_key):
                if (
                    notification_id == sent.get("id")
                    and action_key == DEFAULT_ACTION
                    and self._is_latest(sent["alert"])
                ):
                    self.activated.emit()

            def on_notification_closed(notification_id, _reason):
                if notification_id == sent.get("id"):
                    closed.set()

            iface.on_action_invoked(on_action_invoked)
            iface.on_notification_closed(on_notification_closed)

            # Reuse the previous banner so alerts don't stack up
            with self._lock:
                self._latest_alert += 1
                alert = self._latest_alert
                replaces_id = self._replaces_id
            notification_id = await iface.call_notify(
                APP_NAME,
                replaces_id,
                ALERT_ICON,
                summary,
                body,
                [DEFAULT_ACTION, "Open"],
                {},
                ALERT_TIMEOUT_MS,
            )
            with self._lock:
                if alert == self._latest_alert:
                    self._replaces_id = notification_id
            sent.update(id=notification_id, alert=alert)

            try:
                await asyncio.wait_for(closed.wait(), LISTEN_TIMEOUT_S)
            except asyncio.TimeoutError:
                logger.debug("Stopped listening to alert %d", notification_id)
        finally:
            bus.disconnect()

    def _is_latest(self, alert: int) -> bool:
        with self._lock:
            return alert == self._latest_alert
