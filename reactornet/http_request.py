"""A parsed HTTP request."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from reactornet.timestamp import Timestamp


class Method(Enum):
    INVALID = "UNKNOWN"
    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"
    PUT = "PUT"
    DELETE = "DELETE"


class Version(Enum):
    UNKNOWN = 0
    HTTP10 = 10
    HTTP11 = 11


_METHODS = {
    "GET": Method.GET,
    "POST": Method.POST,
    "HEAD": Method.HEAD,
    "PUT": Method.PUT,
    "DELETE": Method.DELETE,
}


@dataclass
class HttpRequest:
    """Request line, headers and receive time of one HTTP request."""

    method: Method = Method.INVALID
    version: Version = Version.UNKNOWN
    path: str = ""
    query: str = ""
    receive_time: Timestamp = Timestamp()
    headers: dict[str, str] = field(default_factory=dict)

    def set_method(self, name: str | bytes) -> bool:
        """Set the method from its name; return False if it is not supported."""
        if isinstance(name, (bytes, bytearray)):
            name = bytes(name).decode("latin-1")
        self.method = _METHODS.get(name, Method.INVALID)
        return self.method is not Method.INVALID

    def method_string(self) -> str:
        return self.method.value

    def add_header(self, field: str, value: str) -> None:
        """Store a header, trimming whitespace around the value."""
        self.headers[field] = value.strip()

    def get_header(self, field: str) -> str:
        """Return a header value, or an empty string if absent."""
        return self.headers.get(field, "")