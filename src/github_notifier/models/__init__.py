"""Qt models for GitHub Notifier."""

from github_notifier.models.notification_model import NotificationListModel

__all__ = ["NotificationListModel"]
