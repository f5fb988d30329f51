"""An HTTP response and its wire encoding."""

from __future__ import annotations

from enum import IntEnum
from typing import Protocol


class StatusCode(IntEnum):
    UNKNOWN = 0
    OK = 200
    MOVED_PERMANENTLY = 301
    BAD_REQUEST = 400
    NOT_FOUND = 404


class _Appendable(Protocol):
    def append(self, data: bytes) -> None: ...


class HttpResponse:
    """Status line, headers and body of an HTTP/1.1 response."""

    def __init__(self, close_connection: bool) -> None:
        self.status_code = StatusCode.UNKNOWN
        self.status_message = ""
        self.close_connection = close_connection
        self.headers: dict[str, str] = {}
        self.body: bytes | str = b""

    def set_content_type(self, content_type: str) -> None:
        self.add_header("Content-Type", content_type)

    def add_header(self, key: str, value: str) -> None:
        self.headers[key] = value

    def to_bytes(self) -> bytes:
        """Encode the response as it goes on the wire."""
        body = self.body.encode("utf-8") if isinstance(self.body, str) else bytes(self.body)
        lines = [f"HTTP/1.1 {int(self.status_code)} {self.status_message}\r\n"]
        if self.close_connection:
            lines.append("Connection: close\r\n")
        else:
            lines.append(f"Content-Length: {len(body)}\r\n")
            lines.append("Connection: Keep-Alive\r\n")
        lines.extend(f"{key}: {value}\r\n" for key, value in self.headers.items())
        lines.append("\r\n")
        return "".join(lines).encode("utf-8") + body

    def append_to_buffer(self, output: _Appendable) -> None:
        """Append the encoded response to ``output``."""
        output.append(self.to_bytes())