"""Append-only log files that roll over by size and by day."""

from __future__ import annotations

import threading
import time

ROLL_PER_SECONDS = 60 * 60 * 24
_FILE_BUFFER_SIZE = 64 * 1024


def log_file_name(basename: str, now: int) -> str:
    """Return '<basename>.<YYYYmmdd-HHMMSS>.log' for local time ``now``."""
    return basename + time.strftime(".%Y%m%d-%H%M%S", time.localtime(now)) + ".log"


class AppendFile:
    """A buffered file opened for appending that counts the bytes written."""

    def __init__(self, path: str) -> None:
        self._file = open(path, "ab", buffering=_FILE_BUFFER_SIZE)
        self.written_bytes = 0

    def append(self, data: bytes | bytearray | str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._file.write(data)
        self.written_bytes += len(data)

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class LogFile:
    """Writes log data, starting a new file past ``roll_size`` bytes or a new day."""

    def __init__(
        self,
        basename: str,
        roll_size: int,
        flush_interval: int = 3,
        check_every_n: int = 1024,
    ) -> None:
        self.basename = basename
        self.roll_size = roll_size
        self.flush_interval = flush_interval
        self.check_every_n = check_every_n
        self._count = 0
        self._lock = threading.Lock()
        self._start_of_period = 0
        self._last_roll = 0
        self._last_flush = 0
        self._file: AppendFile | None = None
        self.roll_file()

    def append(self, data: bytes | bytearray | str) -> None:
        with self._lock:
            self._append_in_lock(data)

    def _append_in_lock(self, data: bytes | bytearray | str) -> None:
        assert self._file is not None
        self._file.append(data)
        if self._file.written_bytes > self.roll_size:
            self.roll_file()
            return
        self._count += 1
        if self._count >= self.check_every_n:
            self._count = 0
            now = int(time.time())
            this_period = now // ROLL_PER_SECONDS * ROLL_PER_SECONDS
            if this_period != self._start_of_period:
                self.roll_file()
            elif now - self._last_flush > self.flush_interval:
                self._last_flush = now
                self._file.flush()

    def flush(self) -> None:
        if self._file is not None:
            self._file.flush()

    def roll_file(self) -> bool:
        """Open a new file unless one was opened in the same second."""
        now = int(time.time())
        filename = log_file_name(self.basename, now)
        start = now // ROLL_PER_SECONDS * ROLL_PER_SECONDS
        if now <= self._last_roll:
            return False
        self._last_roll = now
        self._last_flush = now
        self._start_of_period = start
        if self._file is not None:
            self._file.close()
        self._file = AppendFile(filename)
        return True

    def close(self) -> None:
        if self._file is not None:
            self._file.close()