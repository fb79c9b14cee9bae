"""Group notifications for display by repository, subject type or reason."""

from github_notifier.types import GroupBy, NotificationItem, Reason, SubjectType

# Rows shown before the rest collapses into an overflow count
MAX_VISIBLE_ITEMS = 25

TYPE_LABELS = {
    SubjectType.PULL_REQUEST: "Pull Requests",
    SubjectType.ISSUE: "Issues",
    SubjectType.COMMIT: "Commits",
    SubjectType.RELEASE: "Releases",
    SubjectType.DISCUSSION: "Discussions",
    SubjectType.CHECK_SUITE: "Check Suites",
    SubjectType.VULNERABILITY_ALERT: "Vulnerability Alerts",
    SubjectType.OTHER: "Other",
}

REASON_LABELS = {
    Reason.ASSIGN: "Assigned",
    Reason.AUTHOR: "Author",
    Reason.COMMENT: "Comment",
    Reason.CI_ACTIVITY: "CI Activity",
    Reason.INVITATION: "Invitation",
    Reason.MANUAL: "Manual",
    Reason.MENTION: "Mentioned",
    Reason.REVIEW_REQUESTED: "Review Requested",
    Reason.SECURITY_ALERT: "Security Alert",
    Reason.STATE_CHANGE: "State Change",
    Reason.SUBSCRIBED: "Subscribed",
    Reason.TEAM_MENTION: "Team Mentioned",
    Reason.APPROVAL_REQUESTED: "Approval Requested",
    Reason.OTHER: "Other",
}


def group_label(item: NotificationItem, mode: GroupBy) -> str:
    """Human-readable group header for an item under the given mode."""
    if mode == GroupBy.REPOSITORY:
        return item.repository or "Unknown"
    if mode == GroupBy.TYPE:
        return TYPE_LABELS.get(item.subject_type, item.subject_type.value)
    if mode == GroupBy.REASON:
        return REASON_LABELS.get(item.reason, item.reason.value)
    return "All"


def group_notifications(
    items: list[NotificationItem], mode: GroupBy
) -> list[tuple[str, list[NotificationItem]]]:
    """Bucket items by group label.

    Groups appear in the order their first member appears, and members
    keep their API order, so the newest activity stays on top.
    """
    groups: dict[str, list[NotificationItem]] = {}
    for item in items:
        groups.setdefault(group_label(item, mode), []).append(item)
    return list(groups.items())


def visible_items(items: list[NotificationItem]) -> tuple[list[NotificationItem], int]:
    """Split into the rows to show and the number collapsed into overflow."""
    shown = list(items[:MAX_VISIBLE_ITEMS])
    return shown, max(len(items) - MAX_VISIBLE_ITEMS, 0)
