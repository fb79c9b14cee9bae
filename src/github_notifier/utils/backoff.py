"""Poll delay computation with exponential back-off on consecutive failures."""

from github_notifier.types.config import MAX_REFRESH_INTERVAL

DEFAULT_SERVER_INTERVAL = 60

# Seconds to wait after the 1st, 2nd, ... failure. The last entry repeats.
BACKOFF_TABLE = (60, 120, 240, 480, 960, 1920, 3600)


def next_delay(retry_count: int, server_interval: int, user_interval: int) -> int:
    """Return the seconds until the next poll.

    retry_count == 0 means the last fetch succeeded and the user's refresh
    interval applies. Otherwise the back-off table is used. The server's
    advertised minimum interval is never undercut.
    """
    if retry_count <= 0:
        return max(user_interval, server_interval)
    idx = min(retry_count - 1, len(BACKOFF_TABLE) - 1)
    return max(BACKOFF_TABLE[idx], server_interval)


def parse_poll_interval(value: str | None) -> int:
    """Parse an X-Poll-Interval header value.

    The result is floored at the default and capped at the longest refresh
    interval a user may configure, so it always fits a QTimer.
    """
    if not value:
        return DEFAULT_SERVER_INTERVAL
    try:
        seconds = int(value.strip())
    except ValueError:
        return DEFAULT_SERVER_INTERVAL
    return min(max(seconds, DEFAULT_SERVER_INTERVAL), MAX_REFRESH_INTERVAL)
