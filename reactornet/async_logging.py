"""Double-buffered asynchronous logging to rolling files."""

from __future__ import annotations

import threading

from reactornet.fixed_buffer import LARGE_BUFFER, FixedBuffer
from reactornet.log_file import LogFile
from reactornet.thread import Thread


class AsyncLogging:
    """Front ends append into memory buffers; a background thread writes them out."""

    def __init__(self, basename: str, roll_size: int, flush_interval: int = 3) -> None:
        self.basename = basename
        self.roll_size = roll_size
        self.flush_interval = flush_interval
        self._running = False
        self._thread = Thread(self._thread_func, "Logging")
        self._lock = threading.Lock()
        self._cond = threading.Condition(self._lock)
        self._current = FixedBuffer(LARGE_BUFFER)
        self._next: FixedBuffer | None = FixedBuffer(LARGE_BUFFER)
        self._buffers: list[FixedBuffer] = []

    @property
    def running(self) -> bool:
        return self._running

    def append(self, data: bytes | bytearray | str) -> None:
        """Queue ``data`` for writing; wakes the writer when a buffer fills."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        with self._lock:
            if self._current.avail() > len(data):
                self._current.append(data)
                return
            self._buffers.append(self._current)
            self._current = self._next if self._next is not None else FixedBuffer(LARGE_BUFFER)
            self._next = None
            self._current.append(data)
            self._cond.notify()

    def start(self) -> None:
        self._running = True
        self._thread.start()

    def stop(self) -> None:
        """Stop the writer after it has written everything queued."""
        if not self._running:
            return
        with self._lock:
            self._running = False
            self._cond.notify()
        self._thread.join()

    def _swap(self, spares: list[FixedBuffer], wait: bool) -> list[FixedBuffer]:
        with self._lock:
            if wait and not self._buffers and self._running:
                self._cond.wait(self.flush_interval)
            self._buffers.append(self._current)
            self._current = spares.pop() if spares else FixedBuffer(LARGE_BUFFER)
            if self._next is None:
                self._next = spares.pop() if spares else FixedBuffer(LARGE_BUFFER)
            to_write, self._buffers = self._buffers, []
        return to_write

    @staticmethod
    def _write(output: LogFile, to_write: list[FixedBuffer], spares: list[FixedBuffer]) -> None:
        for buffer in to_write:
            if buffer.length():
                output.append(buffer.data())
        while len(spares) < 2 and to_write:
            buffer = to_write.pop()
            buffer.reset()
            spares.append(buffer)
        output.flush()

    def _thread_func(self) -> None:
        output = LogFile(self.basename, self.roll_size, self.flush_interval)
        spares = [FixedBuffer(LARGE_BUFFER), FixedBuffer(LARGE_BUFFER)]
        try:
            while self._running:
                self._write(output, self._swap(spares, wait=True), spares)
            self._write(output, self._swap(spares, wait=False), spares)
        finally:
            output.close()

    def __enter__(self) -> AsyncLogging:
        if not self._running:
            self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()