"""Application configuration manager wrapping QSettings."""

import logging

from PySide6.QtCore import QObject, Signal, Slot, QSettings

from github_notifier.types import ConfigSnapshot, GroupBy

logger = logging.getLogger(__name__)

# Default values
DEFAULTS = {
    "account/domain": "github.com",
    "account/token": "",
    "polling/refreshInterval": 60,
    "notifications/showAlert": True,
    "notifications/participatingOnly": False,
    "appearance/groupBy": "none",
    "appearance/hideWidget": False,
    "appearance/hideCount": False,
    "advanced/debugLogging": False,
}

# Keys whose change makes an in-flight list request meaningless
REQUEST_KEYS = frozenset({
    "account/domain",
    "account/token",
    "notifications/participatingOnly",
})

SCHEDULE_KEYS = frozenset({"polling/refreshInterval"})


class ConfigManager(QObject):
    """QSettings-backed preferences, with typed slots and a change signal per key."""

    settings_changed = Signal(str)  # key

    def __init__(self, parent=None):
        super().__init__(parent)
        self._settings = QSettings()

    @Slot(str, result=str)
    def get_string(self, key: str) -> str:
        return str(self._settings.value(key, DEFAULTS.get(key, "")))

    @Slot(str, result=int)
    def get_int(self, key: str) -> int:
        val = self._settings.value(key, DEFAULTS.get(key, 0))
        try:
            return int(val)
        except (ValueError, TypeError):
            return DEFAULTS.get(key, 0)

    @Slot(str, result=bool)
    def get_bool(self, key: str) -> bool:
        val = self._settings.value(key, DEFAULTS.get(key, False))
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    @Slot(str, str)
    def set_string(self, key: str, value: str):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, int)
    def set_int(self, key: str, value: int):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    @Slot(str, bool)
    def set_bool(self, key: str, value: bool):
        self._settings.setValue(key, value)
        self.settings_changed.emit(key)

    def snapshot(self) -> ConfigSnapshot:
        """Read every setting into an immutable snapshot."""
        return ConfigSnapshot(
            domain=self.get_string("account/domain"),
            token=self.get_string("account/token").strip(),
            refresh_interval=self.get_int("polling/refreshInterval"),
            show_alert=self.get_bool("notifications/showAlert"),
            participating_only=self.get_bool("notifications/participatingOnly"),
            group_by=GroupBy.parse(self.get_string("appearance/groupBy")),
            hide_widget=self.get_bool("appearance/hideWidget"),
            hide_count=self.get_bool("appearance/hideCount"),
        )
