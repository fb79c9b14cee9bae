"""Services for GitHub Notifier."""

from github_notifier.services.config_manager import ConfigManager
from github_notifier.services.notification_store import NotificationStore
from github_notifier.services.http_transport import QtHttpTransport
from github_notifier.services.poll_scheduler import PollScheduler, PollState
from github_notifier.services.action_dispatcher import ActionDispatcher
from github_notifier.services.desktop_notifier import DesktopNotifier, open_in_browser

__all__ = [
    "ConfigManager",
    "NotificationStore",
    "QtHttpTransport",
    "PollScheduler",
    "PollState",
    "ActionDispatcher",
    "DesktopNotifier",
    "open_in_browser",
]
