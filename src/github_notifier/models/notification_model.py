"""QAbstractListModel for the notification list and panel indicator."""

import time

from PySide6.QtCore import QAbstractListModel, QModelIndex, Qt, Signal, Property

from github_notifier.types import GroupBy, NotificationItem
from github_notifier.utils.grouping import (
    REASON_LABELS,
    TYPE_LABELS,
    group_notifications,
    visible_items,
)

ERROR_LABEL = "!"


class NotificationListModel(QAbstractListModel):
    """Exposes the cached notifications to QML, grouped into sections.

    Rows are capped at MAX_VISIBLE_ITEMS; the rest is reported through
    overflowCount.
    """

    ThreadIdRole = Qt.UserRole + 1
    RepositoryRole = Qt.UserRole + 2
    TitleRole = Qt.UserRole + 3
    SubjectTypeRole = Qt.UserRole + 4
    TypeLabelRole = Qt.UserRole + 5
    ReasonRole = Qt.UserRole + 6
    ReasonLabelRole = Qt.UserRole + 7
    RelativeTimeRole = Qt.UserRole + 8
    SectionRole = Qt.UserRole + 9

    indicator_changed = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._all: list[NotificationItem] = []
        self._rows: list[tuple[str, NotificationItem]] = []   # (section, item)
        self._overflow = 0
        self._group_by = GroupBy.NONE
        self._auth_error = False
        self._hide_widget = False
        self._hide_count = False

    def roleNames(self):
        return {
            self.ThreadIdRole: b"threadId",
            self.RepositoryRole: b"repository",
            self.TitleRole: b"title",
            self.SubjectTypeRole: b"subjectType",
            self.TypeLabelRole: b"typeLabel",
            self.ReasonRole: b"reason",
            self.ReasonLabelRole: b"reasonLabel",
            self.RelativeTimeRole: b"relativeTime",
            self.SectionRole: b"section",
        }

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid() or index.row() >= len(self._rows):
            return None

        section, item = self._rows[index.row()]

        if role == self.ThreadIdRole:
            return item.id
        elif role == self.RepositoryRole:
            return item.repository
        elif role == self.TitleRole:
            return item.title or "Untitled"
        elif role == self.SubjectTypeRole:
            return item.subject_type.value
        elif role == self.TypeLabelRole:
            return TYPE_LABELS.get(item.subject_type, item.subject_type.value)
        elif role == self.ReasonRole:
            return item.reason.value
        elif role == self.ReasonLabelRole:
            return REASON_LABELS.get(item.reason, item.reason.value)
        elif role == self.RelativeTimeRole:
            return self._format_relative_time(item.updated_at.timestamp())
        elif role == self.SectionRole:
            return section
        elif role == Qt.DisplayRole:
            return f"{item.repository}: {item.title}"
        return None

    def set_notifications(self, items):
        """Replace the entire notification list."""
        self._all = list(items)
        self._rebuild()

    def set_group_by(self, mode: GroupBy):
        if mode != self._group_by:
            self._group_by = mode
            self._rebuild()

    def set_auth_error(self, value: bool):
        if value != self._auth_error:
            self._auth_error = value
            self.indicator_changed.emit()

    def set_display_options(self, hide_widget: bool, hide_count: bool):
        if (hide_widget, hide_count) != (self._hide_widget, self._hide_count):
            self._hide_widget = hide_widget
            self._hide_count = hide_count
            self.indicator_changed.emit()

    def _rebuild(self):
        shown, overflow = visible_items(self._all)
        self.beginResetModel()
        if self._group_by == GroupBy.NONE:
            self._rows = [("", item) for item in shown]
        else:
            self._rows = [
                (f"{label}  ({len(members)})", item)
                for label, members in group_notifications(shown, self._group_by)
                for item in members
            ]
        self._overflow = overflow
        self.endResetModel()
        self.indicator_changed.emit()

    # ------------------------------------------------------------------
    # Indicator properties
    # ------------------------------------------------------------------

    def _get_count(self) -> int:
        return len(self._all)

    count = Property(int, _get_count, notify=indicator_changed)

    def _get_count_label(self) -> str:
        return ERROR_LABEL if self._auth_error else str(len(self._all))

    countLabel = Property(str, _get_count_label, notify=indicator_changed)

    def _get_auth_error(self) -> bool:
        return self._auth_error

    authError = Property(bool, _get_auth_error, notify=indicator_changed)

    def _get_indicator_visible(self) -> bool:
        return not self._hide_widget or len(self._all) > 0 or self._auth_error

    indicatorVisible = Property(bool, _get_indicator_visible, notify=indicator_changed)

    def _get_count_visible(self) -> bool:
        return not self._hide_count

    countVisible = Property(bool, _get_count_visible, notify=indicator_changed)

    def _get_overflow(self) -> int:
        return self._overflow

    overflowCount = Property(int, _get_overflow, notify=indicator_changed)

    @staticmethod
    def _format_relative_time(timestamp: float) -> str:
        """Format a timestamp as a human-readable relative time."""
        diff = time.time() - timestamp
        if diff < 60:
            return "just now"
        elif diff < 3600:
            return f"{int(diff / 60)}m ago"
        elif diff < 86400:
            return f"{int(diff / 3600)}h ago"
        elif diff < 604800:
            return f"{int(diff / 86400)}d ago"
        elif diff < 2592000:
            return f"{int(diff / 604800)}w ago"
        else:
            return f"{int(diff / 2592000)}mo ago"
