"""Type definitions for GitHub Notifier."""

from github_notifier.types.notifications import NotificationItem, Reason, SubjectType
from github_notifier.types.config import ConfigSnapshot, GroupBy
from github_notifier.types.http import ApiRequest, HttpResponse, TransportError

__all__ = [
    "NotificationItem",
    "Reason",
    "SubjectType",
    "ConfigSnapshot",
    "GroupBy",
    "ApiRequest",
    "HttpResponse",
    "TransportError",
]
