"""Shared test helpers."""

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

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


class StaticConfig:
    """Config source returning a fixed snapshot that tests can swap."""

    def __init__(self, **kwargs):
        self._snapshot = ConfigSnapshot(**kwargs)

    def snapshot(self) -> ConfigSnapshot:
        return self._snapshot

    def update(self, **kwargs):
        self._snapshot = dataclasses.replace(self._snapshot, **kwargs)


@dataclass
class PendingCall:
    request: ApiRequest
    callback: Callable


class FakeTransport:
    """Records requests; tests deliver outcomes explicitly and in any order."""

    def __init__(self):
        self.calls: list[PendingCall] = []
        self.sent: list[ApiRequest] = []
        self.aborted = False

    def request(self, api_request: ApiRequest, callback: Callable) -> None:
        self.sent.append(api_request)
        self.calls.append(PendingCall(api_request, callback))

    @property
    def pending(self) -> int:
        return len(self.calls)

    @property
    def last_request(self) -> ApiRequest:
        return self.sent[-1]

    def respond(self, outcome, index: int = 0):
        call = self.calls.pop(index)
        call.callback(outcome)

    def abort_all(self):
        self.aborted = True


def raw_notification(
    thread_id: str,
    repo: str = "octo/repo",
    title: str = "Fix the thing",
    subject_type: str = "PullRequest",
    reason: str = "mention",
    url: str | None = None,
    updated_at: str = "2026-10-18T09:30:00Z",
) -> dict:
    if url is None and subject_type == "PullRequest":
        url = f"https://api.github.com/repos/{repo}/pulls/{thread_id}"
    return {
        "id": thread_id,
        "unread": True,
        "reason": reason,
        "updated_at": updated_at,
        "subject": {"title": title, "url": url, "type": subject_type},
        "repository": {"full_name": repo},
    }


def list_response(raws: list, status: int = 200, poll_interval: str | None = "60") -> HttpResponse:
    headers = {"content-type": "application/json"}
    if poll_interval is not None:
        headers["x-poll-interval"] = poll_interval
    return HttpResponse(status, headers, orjson.dumps(raws))


def status_response(status: int, body: bytes = b"") -> HttpResponse:
    return HttpResponse(status, {}, body)


def network_error(message: str = "Connection refused") -> TransportError:
    return TransportError(message)


def make_item(
    thread_id: str,
    repo: str = "octo/repo",
    subject_type: SubjectType = SubjectType.PULL_REQUEST,
    reason: Reason = Reason.MENTION,
    url: str | None = None,
    title: str = "Title",
) -> NotificationItem:
    return NotificationItem(
        id=thread_id,
        repository=repo,
        title=title,
        subject_type=subject_type,
        reason=reason,
        subject_url=url,
        updated_at=datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc),
    )
