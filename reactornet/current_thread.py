"""Per-thread helpers: cached kernel thread id and microsecond sleep."""

from __future__ import annotations

import threading
import time

from reactornet.timestamp import MICRO_SECONDS_PER_SECOND

_local = threading.local()


def tid() -> int:
    """Return the native id of the calling thread, cached per thread."""
    cached = getattr(_local, "tid", 0)
    if not cached:
        cached = threading.get_native_id()
        _local.tid = cached
    return cached


def sleep_usec(usec: int) -> None:
    """Sleep for ``usec`` microseconds; non-positive values return at once."""
    if usec <= 0:
        return
    time.sleep(usec / MICRO_SECONDS_PER_SECOND)