"""Incremental parser for HTTP request lines and headers."""

from __future__ import annotations

from enum import Enum

from reactornet.buffer import Buffer
from reactornet.http_request import HttpRequest, Version
from reactornet.timestamp import Timestamp

_VERSION_PREFIX = b"HTTP/1."


class ParseState(Enum):
    EXPECT_REQUEST_LINE = 0
    EXPECT_HEADERS = 1
    EXPECT_BODY = 2
    GOT_ALL = 3


def _text(data: bytes) -> str:
    return data.decode("latin-1")


class HttpContext:
    """Parses a request out of a Buffer into an HttpRequest."""

    def __init__(self) -> None:
        self.state = ParseState.EXPECT_REQUEST_LINE
        self.request = HttpRequest()

    def _process_request_line(self, line: bytes) -> bool:
        space = line.find(b" ")
        if space < 0 or not self.request.set_method(_text(line[:space])):
            return False
        start = space + 1
        space = line.find(b" ", start)
        if space < 0:
            return False
        target = line[start:space]
        question = target.find(b"?")
        if question >= 0:
            self.request.path = _text(target[:question])
            self.request.query = _text(target[question:])
        else:
            self.request.path = _text(target)
        version = line[space + 1:]
        if len(version) != 8 or not version.startswith(_VERSION_PREFIX):
            return False
        minor = version[-1:]
        if minor == b"1":
            self.request.version = Version.HTTP11
        elif minor == b"0":
            self.request.version = Version.HTTP10
        else:
            return False
        return True

    def parse_request(self, buf: Buffer, receive_time: Timestamp) -> bool:
        """Consume as much of the request as ``buf`` holds; False on a malformed request line."""
        ok = True
        while True:
            if self.state is ParseState.EXPECT_REQUEST_LINE:
                crlf = buf.find_crlf()
                if crlf is None:
                    break
                ok = self._process_request_line(buf.peek()[:crlf])
                if not ok:
                    break
                self.request.receive_time = receive_time
                buf.retrieve_until(crlf + 2)
                self.state = ParseState.EXPECT_HEADERS
            elif self.state is ParseState.EXPECT_HEADERS:
                crlf = buf.find_crlf()
                if crlf is None:
                    break
                line = buf.peek()[:crlf]
                colon = line.find(b":")
                buf.retrieve_until(crlf + 2)
                if colon >= 0:
                    self.request.add_header(_text(line[:colon]), _text(line[colon + 1:]).strip())
                else:
                    self.state = ParseState.GOT_ALL
                    break
            else:
                break
        return ok

    def got_all(self) -> bool:
        return self.state is ParseState.GOT_ALL

    def reset(self) -> None:
        """Forget the parsed request and wait for a new request line."""
        self.state = ParseState.EXPECT_REQUEST_LINE
        self.request = HttpRequest()