"""GitHub Notifications REST API: request builders and response interpreters.

Builders are pure functions of the config snapshot and return an
ApiRequest for the transport to send. Interpreters take whatever the
transport produced (HttpResponse or TransportError) and either return a
typed value or raise an ApiError subclass. Nothing here touches the
network or holds state.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import quote

import orjson

from github_notifier.types import (
    ApiRequest,
    ConfigSnapshot,
    HttpResponse,
    NotificationItem,
    Reason,
    SubjectType,
    TransportError,
)
from github_notifier.utils.backoff import parse_poll_interval
from github_notifier.utils.url_resolver import releases_page_url

logger = logging.getLogger(__name__)

USER_AGENT = "github-notifier"
ACCEPT = "application/vnd.github+json"
POLL_INTERVAL_HEADER = "X-Poll-Interval"

MUTATION_SUCCESS = frozenset({200, 204, 205})


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ApiError(Exception):
    """Base class for every failure the API client reports."""


class Unauthorized(ApiError):
    """HTTP 401: the token is invalid or revoked."""

    def __init__(self):
        super().__init__("401 Unauthorized - check token")


class HttpError(ApiError):
    def __init__(self, status: int):
        super().__init__(f"HTTP {status}")
        self.status = status


class NetworkError(ApiError):
    """Transport-level failure before any HTTP status was received."""


class MalformedResponse(ApiError):
    """The status was fine but the body is not what the API promises."""


@dataclass
class ListResult:
    items: list[NotificationItem]
    poll_interval: int | None   # seconds, from X-Poll-Interval when sent


# ---------------------------------------------------------------------------
# Request builders
# ---------------------------------------------------------------------------

def _headers(config: ConfigSnapshot) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {config.token}",
        "Accept": ACCEPT,
        "User-Agent": USER_AGENT,
    }


def notifications_url(config: ConfigSnapshot, participating: bool = False) -> str:
    url = f"{config.api_base}/notifications"
    if participating:
        url += "?participating=true"
    return url


def build_list_request(config: ConfigSnapshot) -> ApiRequest:
    return ApiRequest(
        "GET",
        notifications_url(config, participating=config.participating_only),
        _headers(config),
    )


def build_mark_one_request(config: ConfigSnapshot, thread_id: str) -> ApiRequest:
    url = f"{config.api_base}/notifications/threads/{quote(thread_id, safe='')}"
    return ApiRequest("PATCH", url, _headers(config))


def build_mark_all_request(config: ConfigSnapshot, now: datetime | None = None) -> ApiRequest:
    """PUT /notifications with last_read_at set to the current time."""
    if now is None:
        now = datetime.now(timezone.utc)
    last_read_at = now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    headers = _headers(config)
    headers["Content-Type"] = "application/json"
    return ApiRequest(
        "PUT",
        notifications_url(config),
        headers,
        orjson.dumps({"last_read_at": last_read_at}),
    )


def is_api_url(url: str, config: ConfigSnapshot) -> bool:
    """True when url points at this account's API, so the token may be sent."""
    return url.startswith(config.api_base + "/")


def build_release_request(config: ConfigSnapshot, api_url: str) -> ApiRequest:
    return ApiRequest("GET", api_url, _headers(config))


def build_connection_test_request(config: ConfigSnapshot) -> ApiRequest:
    return ApiRequest(
        "GET", f"{config.api_base}/notifications?per_page=1", _headers(config)
    )


# ---------------------------------------------------------------------------
# Response interpreters
# ---------------------------------------------------------------------------

def _require_response(outcome: HttpResponse | TransportError) -> HttpResponse:
    if isinstance(outcome, TransportError):
        raise NetworkError(outcome.message)
    return outcome


def _decode(body: bytes):
    if not body:
        raise MalformedResponse("empty body")
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise MalformedResponse(f"invalid JSON: {e}") from e


def _field(raw: dict, key: str, kind: type, where: str):
    value = raw.get(key)
    if not isinstance(value, kind):
        raise MalformedResponse(f"{where}.{key}: expected {kind.__name__}")
    return value


def _parse_timestamp(value: str, where: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise MalformedResponse(f"{where}.updated_at: bad timestamp {value!r}") from e


def parse_notification(raw) -> NotificationItem:
    """Validate one element of the list payload.

    Any missing or mistyped field rejects the element rather than
    producing a half-filled item.
    """
    if not isinstance(raw, dict):
        raise MalformedResponse("notification: expected object")

    thread_id = _field(raw, "id", str, "notification")
    where = f"notification[{thread_id}]"
    subject = _field(raw, "subject", dict, where)
    repository = _field(raw, "repository", dict, where)

    subject_url = subject.get("url")
    if subject_url is not None and not isinstance(subject_url, str):
        raise MalformedResponse(f"{where}.subject.url: expected str or null")

    unread = raw.get("unread", True)
    if not isinstance(unread, bool):
        raise MalformedResponse(f"{where}.unread: expected bool")

    return NotificationItem(
        id=thread_id,
        repository=_field(repository, "full_name", str, f"{where}.repository"),
        title=_field(subject, "title", str, f"{where}.subject"),
        subject_type=SubjectType.parse(_field(subject, "type", str, f"{where}.subject")),
        reason=Reason.parse(_field(raw, "reason", str, where)),
        subject_url=subject_url,
        updated_at=_parse_timestamp(_field(raw, "updated_at", str, where), where),
        unread=unread,
    )


def interpret_list(outcome: HttpResponse | TransportError) -> ListResult:
    """Turn the list response into items plus the server's poll hint."""
    response = _require_response(outcome)
    if response.status == 401:
        raise Unauthorized()
    if response.status >= 400:
        raise HttpError(response.status)
    if response.status != 200:
        raise MalformedResponse(f"unexpected status {response.status} for list")

    data = _decode(response.body)
    if not isinstance(data, list):
        raise MalformedResponse("expected a JSON array")

    items = [parse_notification(raw) for raw in data]
    hint = response.header(POLL_INTERVAL_HEADER)
    return ListResult(items, parse_poll_interval(hint) if hint is not None else None)


def interpret_mutation(outcome: HttpResponse | TransportError) -> None:
    """Mark-one and mark-all share a success set of 200/204/205."""
    response = _require_response(outcome)
    if response.status in MUTATION_SUCCESS:
        return
    if response.status == 401:
        raise Unauthorized()
    raise HttpError(response.status)


def interpret_release(
    outcome: HttpResponse | TransportError, config: ConfigSnapshot, repository: str
) -> str | None:
    """Derive a tag-based web URL from a release resource.

    Returns None when the lookup yields nothing usable. Only a transport
    failure raises.
    """
    response = _require_response(outcome)
    if response.status != 200 or not response.body:
        return None
    try:
        release = orjson.loads(response.body)
    except orjson.JSONDecodeError:
        logger.debug("Release body is not JSON")
        return None
    if not isinstance(release, dict):
        return None

    html_url = release.get("html_url")
    if isinstance(html_url, str) and html_url:
        return html_url

    if not repository:
        return None
    tag = release.get("tag_name")
    if isinstance(tag, str) and tag:
        return f"{config.web_base}/{repository}/releases/tag/{quote(tag, safe='/')}"
    return releases_page_url(config, repository)


def interpret_connection_test(outcome: HttpResponse | TransportError) -> tuple[bool, str]:
    """Summarise a credential check as (ok, message) for the preferences UI."""
    if isinstance(outcome, TransportError):
        return False, outcome.message
    if outcome.status in (200, 304):
        remaining = outcome.header("X-RateLimit-Remaining") or "?"
        scopes = outcome.header("X-OAuth-Scopes") or "n/a"
        return True, f"OK (rate: {remaining}, scopes: {scopes})"
    if outcome.status == 401:
        return False, "401 Unauthorized – bad token"
    return False, f"HTTP {outcome.status}"
