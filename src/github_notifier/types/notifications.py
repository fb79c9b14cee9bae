"""Notification item types."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SubjectType(str, Enum):
    PULL_REQUEST = "PullRequest"
    ISSUE = "Issue"
    COMMIT = "Commit"
    RELEASE = "Release"
    DISCUSSION = "Discussion"
    CHECK_SUITE = "CheckSuite"
    VULNERABILITY_ALERT = "RepositoryVulnerabilityAlert"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str) -> "SubjectType":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class Reason(str, Enum):
    ASSIGN = "assign"
    AUTHOR = "author"
    COMMENT = "comment"
    CI_ACTIVITY = "ci_activity"
    INVITATION = "invitation"
    MANUAL = "manual"
    MENTION = "mention"
    REVIEW_REQUESTED = "review_requested"
    SECURITY_ALERT = "security_alert"
    STATE_CHANGE = "state_change"
    SUBSCRIBED = "subscribed"
    TEAM_MENTION = "team_mention"
    APPROVAL_REQUESTED = "approval_requested"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "Reason":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class NotificationItem:
    id: str                      # Thread id, opaque
    repository: str              # owner/name
    title: str
    subject_type: SubjectType
    reason: Reason
    subject_url: str | None      # API URL, None for some subject types
    updated_at: datetime
    unread: bool = True
