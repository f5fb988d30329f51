"""Growable byte buffer with room to prepend, used for socket input and output.

Layout::

    | prependable bytes | readable bytes | writable bytes |
    0          <=     reader    <=     writer    <=     size
"""

from __future__ import annotations

import os
from typing import Protocol, Union

CHEAP_PREPEND = 8
INITIAL_SIZE = 1024
_EXTRA_SIZE = 65536
_CRLF = b"\r\n"


class _HasFileno(Protocol):
    def fileno(self) -> int: ...


FileLike = Union[int, _HasFileno]


def _fileno(fd: FileLike) -> int:
    return fd if isinstance(fd, int) else fd.fileno()


class Buffer:
    """A byte buffer with separate read and write positions."""

    def __init__(self, initial_size: int = INITIAL_SIZE) -> None:
        self._buf = bytearray(CHEAP_PREPEND + initial_size)
        self._reader = CHEAP_PREPEND
        self._writer = CHEAP_PREPEND

    def readable_bytes(self) -> int:
        return self._writer - self._reader

    def writable_bytes(self) -> int:
        return len(self._buf) - self._writer

    def prependable_bytes(self) -> int:
        return self._reader

    def peek(self) -> bytes:
        """Return a copy of the readable bytes without consuming them."""
        return bytes(self._buf[self._reader:self._writer])

    def find_crlf(self) -> int | None:
        """Offset of the first CRLF in the readable bytes, or None."""
        index = self._buf.find(_CRLF, self._reader, self._writer)
        return None if index < 0 else index - self._reader

    def retrieve_until(self, end: int) -> None:
        """Consume readable bytes up to offset ``end``."""
        if not 0 <= end <= self.readable_bytes():
            raise ValueError(f"offset {end} outside readable range 0..{self.readable_bytes()}")
        self.retrieve(end)

    def retrieve(self, length: int) -> None:
        """Consume ``length`` readable bytes; consuming all of them resets the buffer."""
        if length < 0:
            raise ValueError("length must not be negative")
        if length < self.readable_bytes():
            self._reader += length
        else:
            self.retrieve_all()

    def retrieve_all(self) -> None:
        self._reader = CHEAP_PREPEND
        self._writer = CHEAP_PREPEND

    def retrieve_as_bytes(self, length: int) -> bytes:
        """Consume and return ``length`` readable bytes."""
        if not 0 <= length <= self.readable_bytes():
            raise ValueError(f"cannot retrieve {length} of {self.readable_bytes()} bytes")
        result = bytes(self._buf[self._reader:self._reader + length])
        self.retrieve(length)
        return result

    def retrieve_all_as_bytes(self) -> bytes:
        return self.retrieve_as_bytes(self.readable_bytes())

    def retrieve_as_string(self, length: int) -> str:
        """Consume ``length`` bytes and decode them as UTF-8."""
        return self.retrieve_as_bytes(length).decode("utf-8", errors="replace")

    def retrieve_all_as_string(self) -> str:
        return self.retrieve_as_string(self.readable_bytes())

    def ensure_writable_bytes(self, length: int) -> None:
        if self.writable_bytes() < length:
            self._make_space(length)

    def append(self, data: bytes | bytearray | memoryview | str) -> None:
        """Append ``data`` to the readable region, growing as needed."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        length = len(data)
        self.ensure_writable_bytes(length)
        self._buf[self._writer:self._writer + length] = data
        self._writer += length

    def read_fd(self, fd: FileLike) -> int:
        """Read what is available from ``fd``; return the byte count (0 at EOF).

        Raises OSError (e.g. BlockingIOError) when the read fails.
        """
        writable = self.writable_bytes()
        extra = bytearray(_EXTRA_SIZE)
        with memoryview(self._buf) as view, view[self._writer:] as target:
            buffers = [target, extra] if writable < _EXTRA_SIZE else [target]
            n = os.readv(_fileno(fd), buffers)
        if n <= writable:
            self._writer += n
        else:
            self._writer = len(self._buf)
            self.append(extra[:n - writable])
        return n

    def write_fd(self, fd: FileLike) -> int:
        """Write the readable bytes to ``fd`` without consuming them; return the count."""
        with memoryview(self._buf) as view, view[self._reader:self._writer] as data:
            return os.write(_fileno(fd), data)

    def _make_space(self, length: int) -> None:
        if self.writable_bytes() + self.prependable_bytes() < length + CHEAP_PREPEND:
            self._buf.extend(bytes(self._writer + length - len(self._buf)))
        else:
            readable = self.readable_bytes()
            self._buf[CHEAP_PREPEND:CHEAP_PREPEND + readable] = self._buf[self._reader:self._writer]
            self._reader = CHEAP_PREPEND
            self._writer = CHEAP_PREPEND + readable

    def __len__(self) -> int:
        return self.readable_bytes()

    def __bytes__(self) -> bytes:
        return self.peek()