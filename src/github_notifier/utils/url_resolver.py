"""Translate GitHub API subject URLs into browsable web URLs."""

import re

from github_notifier.types import ConfigSnapshot, NotificationItem

_RELEASE_ID_RE = re.compile(r"/releases/\d+$")


def inbox_url(config: ConfigSnapshot) -> str:
    """The web inbox, honouring the participating-only filter."""
    url = f"{config.web_base}/notifications"
    if config.participating_only:
        url += "/participating"
    return url


def releases_page_url(config: ConfigSnapshot, repository: str) -> str:
    return f"{config.web_base}/{repository}/releases"


def api_to_html_url(api_url: str, config: ConfigSnapshot) -> str:
    """Rewrite a REST resource URL to the matching web page.

    https://api.github.com/repos/o/r/pulls/42 -> https://github.com/o/r/pull/42
    https://ghe.corp/api/v3/repos/o/r/commits/abc -> https://ghe.corp/o/r/commit/abc
    """
    if config.is_enterprise:
        prefix = f"https://{config.domain}/api/v3/repos/"
    else:
        prefix = "https://api.github.com/repos/"

    html_url = api_url
    if html_url.startswith(prefix):
        html_url = f"{config.web_base}/{html_url[len(prefix):]}"

    html_url = html_url.replace("/pulls/", "/pull/", 1)
    html_url = html_url.replace("/commits/", "/commit/", 1)
    return html_url


def html_url_for(item: NotificationItem, config: ConfigSnapshot) -> str:
    """Best browser URL for a notification without any network lookup.

    Release subject URLs carry a numeric id that 404s on the web, so they
    fall back to the repository's releases page.
    """
    if item.subject_url:
        html_url = api_to_html_url(item.subject_url, config)
        if _RELEASE_ID_RE.search(html_url) and item.repository:
            return releases_page_url(config, item.repository)
        return html_url

    if item.repository:
        return f"{config.web_base}/{item.repository}"

    return f"{config.web_base}/notifications"
