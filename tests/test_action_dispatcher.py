"""Tests for github_notifier.services.action_dispatcher."""

import orjson
import pytest

from github_notifier.services.action_dispatcher import ActionDispatcher
from github_notifier.services.poll_scheduler import PollScheduler, PollState
from github_notifier.types import HttpResponse
from helpers import list_response, network_error, raw_notification, status_response

RELEASE_API_URL = "https://api.github.com/repos/hashicorp/terraform/releases/12345"


@pytest.fixture
def scheduler(qapp, config, transport, store):
    s = PollScheduler(config, transport, store)
    yield s
    s.disable()


@pytest.fixture
def opened():
    return []


@pytest.fixture
def dispatcher(scheduler, config, transport, store, opened):
    return ActionDispatcher(config, transport, store, scheduler, opened.append)


@pytest.fixture
def loaded(scheduler, transport):
    """Scheduler enabled with three notifications in the store."""
    scheduler.enable()
    transport.respond(list_response([
        raw_notification("x"),
        raw_notification("y"),
        raw_notification(
            "rel", repo="hashicorp/terraform", subject_type="Release", url=RELEASE_API_URL,
        ),
    ]))
    return scheduler


# ---------------------------------------------------------------------------
# Mark one read
# ---------------------------------------------------------------------------

class TestMarkOneRead:
    def test_success_removes_item(self, loaded, dispatcher, transport, store):
        counts = []
        dispatcher.notifications_changed.connect(lambda n: counts.append(n))

        dispatcher.mark_one_read("x")
        assert transport.last_request.method == "PATCH"
        assert transport.last_request.url.endswith("/notifications/threads/x")

        transport.respond(status_response(205))
        assert store.current_count() == 2
        assert "x" not in [n.id for n in store.items()]
        assert counts == [2]

    def test_does_not_touch_poll_cycle(self, loaded, dispatcher, transport):
        dispatcher.mark_one_read("x")
        transport.respond(status_response(200))
        assert loaded.state == PollState.WAITING
        assert loaded.timer_active()

    def test_failure_keeps_item(self, loaded, dispatcher, transport, store):
        failures = []
        dispatcher.action_failed.connect(lambda m: failures.append(m))
        dispatcher.mark_one_read("x")
        transport.respond(status_response(404))
        assert store.current_count() == 3
        assert len(failures) == 1

    def test_network_failure_keeps_item(self, loaded, dispatcher, transport, store):
        dispatcher.mark_one_read("x")
        transport.respond(network_error())
        assert store.current_count() == 3

    def test_duplicate_request_ignored_while_pending(self, loaded, dispatcher, transport):
        dispatcher.mark_one_read("x")
        dispatcher.mark_one_read("x")
        assert transport.pending == 1

    def test_can_retry_after_completion(self, loaded, dispatcher, transport):
        dispatcher.mark_one_read("x")
        transport.respond(status_response(500))
        dispatcher.mark_one_read("x")
        assert transport.pending == 1

    def test_absent_id_success_is_harmless(self, loaded, dispatcher, transport, store):
        dispatcher.mark_one_read("gone")
        transport.respond(status_response(205))
        assert store.current_count() == 3

    def test_ignored_when_disabled(self, scheduler, dispatcher, transport):
        dispatcher.mark_one_read("x")
        assert transport.pending == 0

    def test_response_after_teardown_is_dropped(self, loaded, dispatcher, transport, store):
        dispatcher.mark_one_read("x")
        loaded.disable()
        transport.respond(status_response(205))
        assert store.current_count() == 3

    def test_stale_poll_may_restore_item(self, loaded, dispatcher, transport, store):
        """Accepted race: a poll that started before the mark wins until the next poll."""
        loaded.refresh_now()
        dispatcher.mark_one_read("x")
        transport.respond(status_response(205), index=1)
        assert "x" not in store
        transport.respond(list_response([raw_notification("x")]), index=0)
        assert "x" in store


# ---------------------------------------------------------------------------
# Mark all read
# ---------------------------------------------------------------------------

class TestMarkAllRead:
    def test_success_clears_store(self, loaded, dispatcher, transport, store):
        counts = []
        dispatcher.notifications_changed.connect(lambda n: counts.append(n))
        dispatcher.mark_all_read()
        request = transport.last_request
        assert request.method == "PUT"
        assert "last_read_at" in orjson.loads(request.body)

        transport.respond(status_response(205))
        assert store.current_count() == 0
        assert counts == [0]

    @pytest.mark.parametrize("status", [200, 204, 205])
    def test_any_success_code_yields_zero(self, loaded, dispatcher, transport, store, status):
        dispatcher.mark_all_read()
        transport.respond(status_response(status))
        assert store.current_count() == 0

    def test_failure_keeps_items(self, loaded, dispatcher, transport, store):
        dispatcher.mark_all_read()
        transport.respond(status_response(401))
        assert store.current_count() == 3

    def test_single_flight(self, loaded, dispatcher, transport):
        dispatcher.mark_all_read()
        dispatcher.mark_all_read()
        dispatcher.mark_one_read("x")
        assert transport.pending == 1

    def test_response_after_teardown_is_dropped(self, loaded, dispatcher, transport, store):
        dispatcher.mark_all_read()
        loaded.disable()
        transport.respond(status_response(205))
        assert store.current_count() == 3


# ---------------------------------------------------------------------------
# Open
# ---------------------------------------------------------------------------

class TestOpen:
    def test_open_pull_request(self, loaded, dispatcher, opened):
        dispatcher.open_notification("x")
        assert opened == ["https://github.com/octo/repo/pull/x"]

    def test_release_resolves_tag(self, loaded, dispatcher, transport, opened):
        dispatcher.open_notification("rel")
        assert transport.last_request.url == RELEASE_API_URL
        transport.respond(HttpResponse(200, {}, orjson.dumps({"tag_name": "v1.9.0"})))
        assert opened == ["https://github.com/hashicorp/terraform/releases/tag/v1.9.0"]

    def test_release_unresolved_opens_releases_page(self, loaded, dispatcher, transport, opened):
        dispatcher.open_notification("rel")
        transport.respond(status_response(404))
        assert opened == ["https://github.com/hashicorp/terraform/releases"]

    def test_release_network_error_opens_releases_page(self, loaded, dispatcher, transport, opened):
        dispatcher.open_notification("rel")
        transport.respond(network_error())
        assert opened == ["https://github.com/hashicorp/terraform/releases"]

    def test_unknown_id_does_nothing(self, loaded, dispatcher, opened):
        dispatcher.open_notification("nope")
        assert opened == []

    def test_open_inbox(self, dispatcher, config, opened):
        config.update(participating_only=True)
        dispatcher.open_inbox()
        assert opened == ["https://github.com/notifications/participating"]

    def test_launch_failure_is_logged(self, loaded, scheduler, config, transport, store):
        def broken(url):
            raise RuntimeError("no browser")

        dispatcher = ActionDispatcher(config, transport, store, scheduler, broken)
        urls = []
        dispatcher.url_opened.connect(lambda u: urls.append(u))
        dispatcher.open_notification("x")
        assert urls == []


# ---------------------------------------------------------------------------
# Refresh and connection test
# ---------------------------------------------------------------------------

class TestMisc:
    def test_refresh_delegates_to_scheduler(self, loaded, dispatcher, transport):
        dispatcher.refresh()
        assert loaded.state == PollState.FETCHING
        assert transport.pending == 1

    def test_connection_test(self, dispatcher, transport):
        results = []
        dispatcher.connection_tested.connect(lambda ok, msg: results.append((ok, msg)))
        dispatcher.test_connection()
        assert transport.last_request.url.endswith("/notifications?per_page=1")
        transport.respond(HttpResponse(200, {"x-ratelimit-remaining": "10"}))
        assert results[0][0] is True
        assert "10" in results[0][1]

    def test_connection_test_without_token(self, dispatcher, config, transport):
        config.update(token="")
        results = []
        dispatcher.connection_tested.connect(lambda ok, msg: results.append((ok, msg)))
        dispatcher.test_connection()
        assert transport.pending == 0
        assert results == [(False, "No token set")]

    def test_connection_result_after_teardown_is_dropped(self, loaded, dispatcher, transport):
        results = []
        dispatcher.connection_tested.connect(lambda ok, msg: results.append((ok, msg)))
        dispatcher.test_connection()
        loaded.disable()
        transport.respond(HttpResponse(200, {"x-ratelimit-remaining": "10"}))
        assert results == []
