"""HTTP request/response values exchanged with the transport."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ApiRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass
class HttpResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)   # lower-cased names
    body: bytes = b""

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


@dataclass
class TransportError:
    """The request never produced an HTTP status (DNS, TLS, reset, timeout, abort)."""

    message: str
    aborted: bool = False
