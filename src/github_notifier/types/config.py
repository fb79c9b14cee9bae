"""Immutable configuration snapshot."""

from dataclasses import dataclass
from enum import Enum

PUBLIC_DOMAIN = "github.com"
MIN_REFRESH_INTERVAL = 60
MAX_REFRESH_INTERVAL = 86400


class GroupBy(str, Enum):
    NONE = "none"
    REPOSITORY = "repo"
    TYPE = "type"
    REASON = "reason"

    @classmethod
    def parse(cls, value: str) -> "GroupBy":
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class ConfigSnapshot:
    domain: str = PUBLIC_DOMAIN
    token: str = ""
    refresh_interval: int = MIN_REFRESH_INTERVAL   # seconds
    show_alert: bool = True
    participating_only: bool = False
    group_by: GroupBy = GroupBy.NONE
    hide_widget: bool = False
    hide_count: bool = False

    def __post_init__(self):
        clamped = min(max(int(self.refresh_interval), MIN_REFRESH_INTERVAL), MAX_REFRESH_INTERVAL)
        object.__setattr__(self, "refresh_interval", clamped)
        object.__setattr__(self, "domain", self.domain.strip() or PUBLIC_DOMAIN)

    def __repr__(self) -> str:
        # Keep the token out of logs
        token = "***" if self.token else "''"
        return (
            f"ConfigSnapshot(domain={self.domain!r}, token={token}, "
            f"refresh_interval={self.refresh_interval}, show_alert={self.show_alert}, "
            f"participating_only={self.participating_only}, group_by={self.group_by.value!r})"
        )

    @property
    def is_enterprise(self) -> bool:
        return self.domain != PUBLIC_DOMAIN

    @property
    def api_base(self) -> str:
        """REST API root: api.github.com or the Enterprise /api/v3 prefix."""
        if self.is_enterprise:
            return f"https://{self.domain}/api/v3"
        return "https://api.github.com"

    @property
    def web_base(self) -> str:
        return f"https://{self.domain}"
