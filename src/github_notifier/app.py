"""Application entry point: wiring of the poller, its sinks and consumers."""

import logging
import os
import signal
import sys

from PySide6.QtGui import QGuiApplication
from PySide6.QtCore import QUrl
from PySide6.QtNetwork import QLocalSocket, QLocalServer

from github_notifier.services.config_manager import ConfigManager
from github_notifier.services.notification_store import NotificationStore
from github_notifier.services.http_transport import QtHttpTransport
from github_notifier.services.poll_scheduler import PollScheduler
from github_notifier.services.action_dispatcher import ActionDispatcher
from github_notifier.services.desktop_notifier import DesktopNotifier, open_in_browser
from github_notifier.models.notification_model import NotificationListModel
from github_notifier.types import GroupBy

logger = logging.getLogger(__name__)

SOCKET_NAME = "github-notifier-instance"
# Optional QML front end; without it the app runs as a background poller
QML_ENV = "GITHUB_NOTIFIER_QML"


def _check_single_instance() -> QLocalServer | None:
    """Enforce single instance via QLocalSocket. Returns server if we're the first instance."""
    socket = QLocalSocket()
    socket.connectToServer(SOCKET_NAME)
    if socket.waitForConnected(500):
        # Another instance is running
        socket.close()
        return None

    server = QLocalServer()
    server.removeServer(SOCKET_NAME)
    server.listen(SOCKET_NAME)
    return server


class Application:
    """Owns every long-lived object and the signal wiring between them."""

    def __init__(self, transport=None, launch_url=open_in_browser):
        self.config = ConfigManager()
        self.store = NotificationStore()
        self.transport = transport if transport is not None else QtHttpTransport()
        self.scheduler = PollScheduler(self.config, self.transport, self.store)
        self.dispatcher = ActionDispatcher(
            self.config, self.transport, self.store, self.scheduler, launch_url
        )
        self.model = NotificationListModel()
        self.notifier = DesktopNotifier()

        # Store changes -> model
        self.scheduler.notifications_changed.connect(self._sync_model)
        self.dispatcher.notifications_changed.connect(self._sync_model)
        self.scheduler.auth_error_changed.connect(self.model.set_auth_error)

        # Alerts -> desktop banner, banner click -> inbox
        self.scheduler.alert_raised.connect(self.notifier.show_alert)
        self.notifier.activated.connect(self.dispatcher.open_inbox)

        # Preferences -> poll cycle and presentation
        self.config.settings_changed.connect(self.scheduler.on_settings_changed)
        self.config.settings_changed.connect(self._apply_display_settings)
        self._apply_display_settings("")

    def _sync_model(self, count: int):
        self.model.set_notifications(self.store.items())
        logger.info("%d unread notification(s)", count)

    def _apply_display_settings(self, _key: str):
        snapshot = self.config.snapshot()
        self.model.set_group_by(snapshot.group_by)
        self.model.set_display_options(snapshot.hide_widget, snapshot.hide_count)

    def start(self):
        self.scheduler.enable()

    def shutdown(self):
        self.scheduler.disable()
        abort_all = getattr(self.transport, "abort_all", None)
        if abort_all is not None:
            abort_all()


def _configure_logging(config: ConfigManager):
    level = logging.DEBUG if config.get_bool("advanced/debugLogging") else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run() -> int:
    """Launch the application."""
    app = QGuiApplication(sys.argv)
    app.setApplicationName("GitHub Notifier")
    app.setOrganizationName("github-notifier")
    app.setOrganizationDomain("github-notifier.local")
    app.setQuitOnLastWindowClosed(False)

    instance_server = _check_single_instance()
    if instance_server is None:
        print("Another instance is already running.", file=sys.stderr)
        return 0

    # Allow Ctrl+C to kill the app
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    application = Application()
    _configure_logging(application.config)
    if not application.config.snapshot().token:
        logger.warning("No GitHub token configured (setting account/token)")

    engine = None
    qml_file = os.environ.get(QML_ENV)
    if qml_file:
        from PySide6.QtQml import QQmlApplicationEngine

        engine = QQmlApplicationEngine()
        ctx = engine.rootContext()
        ctx.setContextProperty("NotificationModel", application.model)
        ctx.setContextProperty("Actions", application.dispatcher)
        ctx.setContextProperty("ConfigManager", application.config)
        ctx.setContextProperty("GroupModes", [m.value for m in GroupBy])
        engine.load(QUrl.fromLocalFile(qml_file))
        if not engine.rootObjects():
            logger.error("Failed to load QML front end %s", qml_file)
            return 1

    application.start()

    ret = app.exec()
    application.shutdown()
    instance_server.close()
    return ret
