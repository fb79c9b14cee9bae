"""Asynchronous HTTP over QNetworkAccessManager, delivered on the GUI thread."""

import logging
from typing import Callable

from PySide6.QtCore import QByteArray, QObject, QUrl
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

from github_notifier.types import ApiRequest, HttpResponse, TransportError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_MS = 30000

Outcome = HttpResponse | TransportError
ResponseCallback = Callable[[Outcome], None]


class QtHttpTransport(QObject):
    """Sends ApiRequests and hands the outcome to a callback.

    Callbacks always run from the event loop, never re-entrantly from
    request(). abort_all() is best effort: aborted replies still complete
    with a TransportError, so callers must guard stale results themselves.
    """

    def __init__(self, parent=None, timeout_ms: int = REQUEST_TIMEOUT_MS):
        super().__init__(parent)
        self._manager = QNetworkAccessManager(self)
        self._manager.setTransferTimeout(timeout_ms)
        self._pending: set[QNetworkReply] = set()

    def request(self, api_request: ApiRequest, callback: ResponseCallback) -> None:
        qrequest = QNetworkRequest(QUrl(api_request.url))
        for name, value in api_request.headers.items():
            qrequest.setRawHeader(QByteArray(name.encode()), QByteArray(value.encode()))

        body = QByteArray(api_request.body or b"")
        reply = self._manager.sendCustomRequest(
            qrequest, QByteArray(api_request.method.encode()), body
        )
        self._pending.add(reply)
        reply.finished.connect(lambda: self._on_finished(reply, callback))
        logger.debug("%s %s", api_request.method, api_request.url)

    def pending_count(self) -> int:
        return len(self._pending)

    def abort_all(self):
        """Abort every outstanding reply."""
        for reply in list(self._pending):
            reply.abort()

    def _on_finished(self, reply: QNetworkReply, callback: ResponseCallback):
        self._pending.discard(reply)
        try:
            outcome = self._to_outcome(reply)
        finally:
            reply.deleteLater()
        callback(outcome)

    @staticmethod
    def _to_outcome(reply: QNetworkReply) -> Outcome:
        status = reply.attribute(QNetworkRequest.Attribute.HttpStatusCodeAttribute)
        if status is None:
            aborted = reply.error() == QNetworkReply.NetworkError.OperationCanceledError
            return TransportError(reply.errorString(), aborted=aborted)

        headers = {
            bytes(name.data()).decode("latin-1").lower(): bytes(value.data()).decode("latin-1")
            for name, value in reply.rawHeaderPairs()
        }
        return HttpResponse(int(status), headers, bytes(reply.readAll().data()))
