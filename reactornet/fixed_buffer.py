"""A fixed-capacity byte buffer that silently drops writes that do not fit."""

from __future__ import annotations

SMALL_BUFFER = 4000
LARGE_BUFFER = 4000 * 1000


class FixedBuffer:
    """Byte buffer of a fixed capacity."""

    def __init__(self, size: int = SMALL_BUFFER) -> None:
        self._size = size
        self._data = bytearray()

    def append(self, data: bytes | bytearray | str) -> None:
        """Append ``data`` if it fits with room to spare; otherwise drop it."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        if self.avail() > len(data):
            self._data += data

    @property
    def size(self) -> int:
        return self._size

    def length(self) -> int:
        """Number of bytes written."""
        return len(self._data)

    def avail(self) -> int:
        """Bytes still free."""
        return self._size - len(self._data)

    def reset(self) -> None:
        self._data.clear()

    def data(self) -> bytes:
        return bytes(self._data)

    def to_string(self) -> str:
        return self._data.decode("utf-8", errors="replace")

    def __len__(self) -> int:
        return self.length()