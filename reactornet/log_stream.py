"""A small-buffer stream that formats values for one log record."""

from __future__ import annotations

from reactornet.fixed_buffer import SMALL_BUFFER, FixedBuffer

MAX_NUMERIC_SIZE = 48


class LogStream:
    """Collects the text of a log record; ``<<`` appends a value and returns the stream."""

    def __init__(self) -> None:
        self._buffer = FixedBuffer(SMALL_BUFFER)

    @property
    def buffer(self) -> FixedBuffer:
        return self._buffer

    def append(self, data: bytes | bytearray | str) -> None:
        """Append raw data; it is dropped if it does not fit."""
        self._buffer.append(data)

    def _append_numeric(self, text: str) -> None:
        if self._buffer.avail() >= MAX_NUMERIC_SIZE:
            self._buffer.append(text)

    def __lshift__(self, value: object) -> LogStream:
        if isinstance(value, int):
            self._append_numeric(str(int(value)))
        elif isinstance(value, float):
            self._append_numeric(format(value, ".12g"))
        elif value is None:
            self._buffer.append(b"(null)")
        elif isinstance(value, (str, bytes, bytearray)):
            self._buffer.append(value)
        elif isinstance(value, memoryview):
            self._buffer.append(value.tobytes())
        elif isinstance(value, FixedBuffer):
            self._buffer.append(value.data())
        else:
            self._buffer.append(str(value))
        return self

    def reset_buffer(self) -> None:
        self._buffer.reset()

    def to_bytes(self) -> bytes:
        """The bytes written so far."""
        return self._buffer.data()